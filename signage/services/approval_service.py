"""Admin resolution of display connection requests.

Approve and reject are conditional updates: the `status == 'pending'` check
and the transition happen in the same UPDATE statement, so a second caller
racing on the same request sees zero affected rows and gets
InvalidStateError. Approval assigns the display in the same transaction.
"""

import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, update
from sqlmodel import Session, col, select

from signage.config import settings
from signage.errors import InvalidStateError, NotFoundError, ValidationError
from signage.models.connection_request import ConnectionRequest
from signage.models.display import Display
from signage.services.registration_service import latest_request_for
from signage.utils.timeutil import as_utc

logger = logging.getLogger(__name__)

REQUEST_STATUSES = ("pending", "approved", "rejected")
REJECTION_REASON_MAX = 500


def get_request(request_id: str, session: Session) -> ConnectionRequest:
    request = session.get(ConnectionRequest, request_id)
    if not request:
        raise NotFoundError("Connection request not found")
    return request


def list_requests(session: Session, status: str | None = None) -> list[ConnectionRequest]:
    query = select(ConnectionRequest)
    if status:
        if status not in REQUEST_STATUSES:
            raise ValidationError(f"Unknown request status: {status}")
        query = query.where(ConnectionRequest.status == status)
    query = query.order_by(col(ConnectionRequest.requested_at).desc())
    return list(session.exec(query).all())


def _resolve(
    request_id: str,
    new_status: str,
    admin_id: str,
    session: Session,
    now: datetime,
    rejection_reason: str | None = None,
) -> ConnectionRequest:
    request = get_request(request_id, session)

    result = session.exec(
        update(ConnectionRequest)
        .where(
            col(ConnectionRequest.id) == request_id,
            col(ConnectionRequest.status) == "pending",
        )
        .values(
            status=new_status,
            responded_at=now,
            responded_by=admin_id,
            rejection_reason=rejection_reason,
        )
    )
    if result.rowcount != 1:
        session.rollback()
        session.refresh(request)
        raise InvalidStateError(f"Connection request is already {request.status}")
    return request


def approve_request(request_id: str, admin_id: str, session: Session) -> Display:
    """Approve a pending request and hand its display to `admin_id`."""
    now = datetime.now(timezone.utc)
    request = _resolve(request_id, "approved", admin_id, session, now)

    result = session.exec(
        update(Display)
        .where(
            col(Display.id) == request.display_id,
            col(Display.assigned_admin).is_(None),
        )
        .values(
            assigned_admin=admin_id,
            status="offline",
            is_connected=False,
            updated_at=now,
        )
    )
    if result.rowcount != 1:
        # Undo the request transition too; neither write may land alone
        session.rollback()
        if not session.get(Display, request.display_id):
            raise NotFoundError("Display for this request no longer exists")
        raise InvalidStateError("Display is already assigned to an admin")

    session.commit()
    display = session.get(Display, request.display_id)
    session.refresh(display)
    logger.info("Request %s approved by %s, display %s assigned", request_id, admin_id, display.id)
    return display


def reject_request(
    request_id: str,
    admin_id: str,
    session: Session,
    reason: str | None = None,
) -> ConnectionRequest:
    """Reject a pending request. The display stays unassigned."""
    reason = reason.strip() if reason else None
    if reason and len(reason) > REJECTION_REASON_MAX:
        raise ValidationError(f"Rejection reason must be at most {REJECTION_REASON_MAX} characters")

    now = datetime.now(timezone.utc)
    request = _resolve(request_id, "rejected", admin_id, session, now, rejection_reason=reason)
    session.commit()
    session.refresh(request)
    logger.info("Request %s rejected by %s: %s", request_id, admin_id, reason or "-")
    return request


def purge_rejected_displays(
    session: Session,
    now: datetime | None = None,
    retention_days: int | None = None,
) -> list[str]:
    """Delete unassigned displays whose latest request was rejected long ago.

    Connection requests are kept. Displays still pending are never touched.
    Returns the ids of the deleted displays.
    """
    if retention_days is None:
        retention_days = settings.rejected_display_retention_days
    if retention_days <= 0:
        return []
    if now is None:
        now = datetime.now(timezone.utc)
    cutoff = now - timedelta(days=retention_days)

    unassigned = session.exec(
        select(Display).where(col(Display.assigned_admin).is_(None))
    ).all()

    purged = []
    for display in unassigned:
        request = latest_request_for(session, display.id)
        if not request or request.status != "rejected" or request.responded_at is None:
            continue
        if as_utc(request.responded_at) >= cutoff:
            continue
        result = session.exec(
            delete(Display).where(
                col(Display.id) == display.id,
                col(Display.assigned_admin).is_(None),
            )
        )
        if result.rowcount:
            purged.append(display.id)

    session.commit()
    if purged:
        logger.info("Purged %d rejected display(s): %s", len(purged), ", ".join(purged))
    return purged
