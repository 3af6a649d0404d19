"""Connection request (registration approval) endpoints."""

import json

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from signage.api.deps import require_admin
from signage.database import get_session
from signage.models.connection_request import ConnectionRequest
from signage.models.user import User
from signage.schemas.connection_request import (
    ConnectionRequestResponse,
    PurgeResponse,
    RejectRequest,
)
from signage.services import approval_service
from signage.utils.timeutil import isoformat

router = APIRouter(prefix="/connection-requests", tags=["connection-requests"])


def _request_response(request: ConnectionRequest) -> ConnectionRequestResponse:
    return ConnectionRequestResponse(
        id=request.id,
        display_id=request.display_id,
        status=request.status,
        device_info=json.loads(request.device_info) if request.device_info else None,
        requested_at=isoformat(request.requested_at),
        responded_at=isoformat(request.responded_at),
        responded_by=request.responded_by,
        rejection_reason=request.rejection_reason,
    )


@router.get("", response_model=list[ConnectionRequestResponse])
def list_requests(
    status: str | None = Query(default=None),
    user: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    """List connection requests, newest first."""
    return [_request_response(r) for r in approval_service.list_requests(session, status=status)]


@router.post("/purge", response_model=PurgeResponse)
def purge_rejected(
    user: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    """Delete displays whose registration was rejected past the retention period."""
    return PurgeResponse(purged=approval_service.purge_rejected_displays(session))


@router.get("/{request_id}", response_model=ConnectionRequestResponse)
def get_request(
    request_id: str,
    user: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    return _request_response(approval_service.get_request(request_id, session))


@router.post("/{request_id}/approve", response_model=ConnectionRequestResponse)
def approve(
    request_id: str,
    user: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    """Approve a pending request; its display is assigned to the caller."""
    approval_service.approve_request(request_id, user.id, session)
    return _request_response(approval_service.get_request(request_id, session))


@router.post("/{request_id}/reject", response_model=ConnectionRequestResponse)
def reject(
    request_id: str,
    request: RejectRequest | None = None,
    user: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    reason = request.rejection_reason if request else None
    return _request_response(approval_service.reject_request(request_id, user.id, session, reason=reason))
