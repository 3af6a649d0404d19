"""Advertisement endpoints."""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from signage.api.deps import get_current_user
from signage.database import get_session
from signage.models.advertisement import Advertisement
from signage.models.user import User
from signage.schemas.advertisement import AdCreateRequest, AdResponse, AdStatusRequest, AdUpdateRequest
from signage.services import ad_service

router = APIRouter(prefix="/ads", tags=["ads"])


def _ad_response(ad: Advertisement) -> AdResponse:
    return AdResponse(
        id=ad.id,
        name=ad.name,
        media_url=ad.media_url,
        media_type=ad.media_type,
        duration=ad.duration,
        status=ad.status,
        description=ad.description,
    )


@router.post("", response_model=AdResponse, status_code=status.HTTP_201_CREATED)
def create_ad(
    request: AdCreateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    ad = ad_service.create_ad(
        owner_id=user.id,
        name=request.name,
        media_url=request.media_url,
        media_type=request.media_type,
        duration=request.duration,
        session=session,
        status=request.status,
        description=request.description,
    )
    return _ad_response(ad)


@router.get("", response_model=list[AdResponse])
def list_ads(
    status_filter: str | None = Query(default=None, alias="status"),
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return [_ad_response(ad) for ad in ad_service.list_ads(user.id, session, status=status_filter)]


@router.get("/{ad_id}", response_model=AdResponse)
def get_ad(
    ad_id: str,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return _ad_response(ad_service.get_owned_ad(ad_id, user.id, session))


@router.put("/{ad_id}", response_model=AdResponse)
def update_ad(
    ad_id: str,
    request: AdUpdateRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    ad = ad_service.update_ad(
        ad_id,
        user.id,
        session,
        name=request.name,
        duration=request.duration,
        description=request.description,
    )
    return _ad_response(ad)


@router.put("/{ad_id}/status", response_model=AdResponse)
def set_ad_status(
    ad_id: str,
    request: AdStatusRequest,
    user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return _ad_response(ad_service.update_ad(ad_id, user.id, session, status=request.status))
