"""Heartbeat ingestion and read-time status derivation.

The stored `Display.status` is whatever the device last reported (or what
an admin set manually). Staleness is applied only when a status is read
for presentation, see `derive_actual_status`; it is never written back.
"""

import logging
from datetime import datetime, timezone

from sqlmodel import Session, col, select

from signage.config import settings
from signage.errors import InvalidStateError, NotFoundError, ValidationError
from signage.models.display import Display
from signage.utils.timeutil import as_utc, isoformat

logger = logging.getLogger(__name__)

DEVICE_STATUSES = ("online", "offline")
STORED_STATUSES = ("online", "offline", "inactive")


def derive_actual_status(
    status: str,
    last_seen: datetime | None,
    now: datetime | None = None,
    offline_after_hours: float | None = None,
) -> str:
    """Status to present for a display, given what is stored.

    A display not heard from for more than `offline_after_hours` is shown as
    offline, unless an admin marked it inactive.
    """
    if last_seen is None or status == "inactive":
        return status

    if now is None:
        now = datetime.now(timezone.utc)
    if offline_after_hours is None:
        offline_after_hours = settings.offline_after_hours

    hours_since_last_seen = (as_utc(now) - as_utc(last_seen)).total_seconds() / 3600
    if hours_since_last_seen > offline_after_hours:
        return "offline"
    return status


def actual_status_of(display: Display, now: datetime | None = None) -> str:
    return derive_actual_status(display.status, display.last_seen, now=now)


def report_heartbeat(
    connection_token: str,
    session: Session,
    reported_status: str | None = None,
    current_ad: str | None = None,
) -> Display:
    """Record a heartbeat from the device holding `connection_token`."""
    reported_status = reported_status or "online"
    if reported_status not in DEVICE_STATUSES:
        raise ValidationError(f"Devices may only report {', '.join(DEVICE_STATUSES)}")

    display = session.exec(
        select(Display).where(Display.connection_token == connection_token)
    ).first()
    if not display:
        raise NotFoundError("Display not found")
    if display.is_pending:
        logger.warning("Heartbeat from unapproved display %s refused", display.id)
        raise InvalidStateError("Display has not been approved yet")

    now = datetime.now(timezone.utc)
    display.last_seen = now
    display.is_connected = True
    # inactive is an admin override the device cannot lift
    if display.status != "inactive":
        display.status = reported_status
    if current_ad is not None:
        display.current_ad = current_ad
    display.updated_at = now
    session.add(display)
    session.commit()
    session.refresh(display)

    logger.debug("Heartbeat from %s: %s (ad=%s)", display.id, reported_status, current_ad)
    return display


def summarize_displays(admin_id: str, session: Session, now: datetime | None = None) -> dict:
    """Dashboard summary of the admin's displays using derived status."""
    displays = session.exec(
        select(Display)
        .where(Display.assigned_admin == admin_id)
        .order_by(col(Display.created_at).desc())
    ).all()

    rows = []
    counts = {status: 0 for status in STORED_STATUSES}
    for display in displays:
        actual = actual_status_of(display, now=now)
        counts[actual] = counts.get(actual, 0) + 1
        rows.append({
            "display_id": display.id,
            "display_name": display.display_name,
            "location": display.location,
            "status": actual,
            "stored_status": display.status,
            "is_connected": display.is_connected,
            "last_seen": isoformat(display.last_seen),
            "resolution": f"{display.resolution_width}x{display.resolution_height}",
        })

    return {
        "total_displays": len(displays),
        "online_count": counts["online"],
        "offline_count": counts["offline"],
        "inactive_count": counts["inactive"],
        "displays": rows,
    }
