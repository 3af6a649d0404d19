"""Loop (playlist) endpoints."""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from signage.api.deps import require_admin
from signage.database import get_session
from signage.models.loop import Loop
from signage.models.user import User
from signage.schemas.loop import (
    LoopCreateRequest,
    LoopItemIn,
    LoopReorderRequest,
    LoopResponse,
    LoopUpdateRequest,
)
from signage.services import loop_service

router = APIRouter(prefix="/loops", tags=["loops"])


def _loop_response(loop: Loop, session: Session) -> LoopResponse:
    return LoopResponse(
        id=loop.id,
        display_id=loop.display_id,
        loop_name=loop.loop_name,
        description=loop.description,
        rotation_type=loop.rotation_type,
        total_duration=loop.total_duration,
        is_active=loop.is_active,
        advertisements=[
            LoopItemIn(ad_id=item.ad_id, loop_order=item.loop_order)
            for item in loop_service.loop_items(loop.id, session)
        ],
    )


@router.post("", response_model=LoopResponse, status_code=status.HTTP_201_CREATED)
def create_loop(
    request: LoopCreateRequest,
    user: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    loop = loop_service.create_loop(
        admin_id=user.id,
        display_id=request.display_id,
        loop_name=request.loop_name,
        advertisements=[item.model_dump() for item in request.advertisements],
        session=session,
        rotation_type=request.rotation_type,
        description=request.description,
    )
    return _loop_response(loop, session)


@router.get("", response_model=list[LoopResponse])
def list_loops(
    display_id: str | None = Query(default=None),
    user: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    return [_loop_response(loop, session) for loop in loop_service.list_loops(user.id, session, display_id)]


@router.get("/{loop_id}", response_model=LoopResponse)
def get_loop(
    loop_id: str,
    user: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    return _loop_response(loop_service.get_loop(loop_id, user.id, session), session)


@router.put("/{loop_id}", response_model=LoopResponse)
def update_loop(
    loop_id: str,
    request: LoopUpdateRequest,
    user: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    loop = loop_service.update_loop(
        loop_id,
        user.id,
        session,
        loop_name=request.loop_name,
        description=request.description,
        rotation_type=request.rotation_type,
        advertisements=[item.model_dump() for item in request.advertisements] if request.advertisements else None,
    )
    return _loop_response(loop, session)


@router.put("/{loop_id}/reorder", response_model=LoopResponse)
def reorder_loop(
    loop_id: str,
    request: LoopReorderRequest,
    user: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    loop = loop_service.reorder_loop(
        loop_id, user.id, [item.model_dump() for item in request.advertisements], session
    )
    return _loop_response(loop, session)


@router.delete("/{loop_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_loop(
    loop_id: str,
    user: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    loop_service.delete_loop(loop_id, user.id, session)
