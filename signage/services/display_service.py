"""Admin-side display management and device-side playlist lookup."""

import logging
import math
from datetime import datetime, timezone

from sqlalchemy import delete
from sqlmodel import Session, col, func, select

from signage.config import settings
from signage.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from signage.models.advertisement import Advertisement
from signage.models.display import Display
from signage.models.loop import Loop, LoopItem
from signage.services.liveness_service import STORED_STATUSES
from signage.services.registration_service import (
    LOCATION_MAX,
    NAME_MAX,
    get_display_by_token,
    validate_display_id,
    validate_resolution,
)
from signage.utils import security

logger = logging.getLogger(__name__)

ORIENTATIONS = ("portrait", "landscape")
ADMIN_NAME_MIN = 3


def _clamp(value: int, low: int = 0, high: int = 100) -> int:
    return min(high, max(low, value))


def get_owned_display(display_id: str, admin_id: str, session: Session) -> Display:
    display = session.get(Display, display_id)
    if not display:
        raise NotFoundError("Display not found")
    if display.assigned_admin != admin_id:
        raise ForbiddenError("You do not have permission to access this display")
    return display


def create_display(
    admin_id: str,
    display_id: str,
    display_name: str,
    location: str,
    session: Session,
    resolution: dict | None = None,
) -> Display:
    """Admin-created display, assigned to its creator from the start."""
    display_id = validate_display_id(display_id)
    display_name = (display_name or "").strip()
    location = (location or "").strip()
    if not ADMIN_NAME_MIN <= len(display_name) <= NAME_MAX:
        raise ValidationError(f"Display name must be at least {ADMIN_NAME_MIN} characters")
    if not ADMIN_NAME_MIN <= len(location) <= LOCATION_MAX:
        raise ValidationError(f"Location must be at least {ADMIN_NAME_MIN} characters")
    width, height = validate_resolution(resolution)

    if session.get(Display, display_id):
        raise ConflictError("Display ID already exists. Choose a different one")

    display = Display(
        id=display_id,
        display_name=display_name,
        location=location,
        connection_token=security.generate_connection_token(),
        assigned_admin=admin_id,
        resolution_width=width,
        resolution_height=height,
    )
    session.add(display)
    session.commit()
    session.refresh(display)
    logger.info("Display %s created by %s", display.id, admin_id)
    return display


def list_displays(
    admin_id: str,
    session: Session,
    status: str | None = None,
    page: int = 1,
    limit: int | None = None,
) -> dict:
    """Displays owned by `admin_id`; unassigned displays never match."""
    limit = min(limit or settings.default_page_size, settings.max_page_size)
    page = max(page, 1)

    conditions = [Display.assigned_admin == admin_id]
    if status:
        if status not in STORED_STATUSES:
            raise ValidationError(f"Unknown display status: {status}")
        conditions.append(Display.status == status)

    total = session.exec(select(func.count()).select_from(Display).where(*conditions)).one()
    displays = session.exec(
        select(Display)
        .where(*conditions)
        .order_by(col(Display.created_at).desc())
        .offset((page - 1) * limit)
        .limit(limit)
    ).all()

    return {
        "displays": list(displays),
        "current_page": page,
        "total_pages": math.ceil(total / limit) if total else 0,
        "page_size": limit,
        "total": total,
    }


def update_display(
    display_id: str,
    admin_id: str,
    session: Session,
    display_name: str | None = None,
    location: str | None = None,
    status: str | None = None,
    resolution: dict | None = None,
    configuration: dict | None = None,
) -> Display:
    display = get_owned_display(display_id, admin_id, session)

    if display_name:
        display.display_name = display_name.strip()
    if location:
        display.location = location.strip()
    if status:
        if status not in STORED_STATUSES:
            raise ValidationError(f"Unknown display status: {status}")
        display.status = status

    if resolution:
        if isinstance(resolution.get("width"), int):
            display.resolution_width = resolution["width"]
        if isinstance(resolution.get("height"), int):
            display.resolution_height = resolution["height"]

    if configuration:
        if isinstance(configuration.get("brightness"), (int, float)):
            display.brightness = _clamp(int(configuration["brightness"]))
        if isinstance(configuration.get("volume"), (int, float)):
            display.volume = _clamp(int(configuration["volume"]))
        if isinstance(configuration.get("refresh_rate"), int):
            display.refresh_rate = configuration["refresh_rate"]
        if configuration.get("orientation") in ORIENTATIONS:
            display.orientation = configuration["orientation"]

    display.updated_at = datetime.now(timezone.utc)
    session.add(display)
    session.commit()
    session.refresh(display)
    logger.info("Display %s updated by %s", display.id, admin_id)
    return display


def delete_display(display_id: str, admin_id: str, session: Session) -> None:
    get_owned_display(display_id, admin_id, session)
    result = session.exec(
        delete(Display).where(
            col(Display.id) == display_id,
            col(Display.assigned_admin) == admin_id,
        )
    )
    if result.rowcount != 1:
        session.rollback()
        raise NotFoundError("Display not found")
    session.commit()
    logger.info("Display %s deleted by %s", display_id, admin_id)


def assign_loop(display_id: str, loop_id: str | None, admin_id: str, session: Session) -> Display:
    """Make `loop_id` the display's current loop (None clears it)."""
    display = get_owned_display(display_id, admin_id, session)
    if loop_id is not None:
        loop = session.get(Loop, loop_id)
        if not loop:
            raise NotFoundError("Loop not found")
        if loop.display_id != display.id:
            raise ValidationError("Loop belongs to a different display")

    # exactly the assigned loop is active for this display; none when cleared
    for candidate in session.exec(select(Loop).where(Loop.display_id == display.id)).all():
        candidate.is_active = candidate.id == loop_id
        session.add(candidate)
    display.current_loop = loop_id
    display.refresh_requested = True
    display.updated_at = datetime.now(timezone.utc)
    session.add(display)
    session.commit()
    session.refresh(display)
    logger.info("Display %s now plays loop %s", display.id, loop_id)
    return display


def trigger_refresh(display_id: str, admin_id: str, session: Session) -> Display:
    display = get_owned_display(display_id, admin_id, session)
    display.refresh_requested = True
    session.add(display)
    session.commit()
    session.refresh(display)
    return display


def consume_refresh_flag(connection_token: str, session: Session) -> bool:
    """Report and clear the display's pending refresh request."""
    display = get_display_by_token(connection_token, session)
    should_refresh = display.refresh_requested
    if should_refresh:
        display.refresh_requested = False
        session.add(display)
        session.commit()
    return should_refresh


def loop_for_token(connection_token: str, session: Session) -> dict:
    """Current loop and its advertisements, in play order, for a device.

    Advertisements are returned with their live status; the device decides
    which of them are eligible to play.
    """
    display = get_display_by_token(connection_token, session)
    if display.is_pending or not display.current_loop:
        return {"loop": None, "advertisements": []}

    loop = session.get(Loop, display.current_loop)
    if not loop:
        logger.warning("Display %s points at missing loop %s", display.id, display.current_loop)
        return {"loop": None, "advertisements": []}

    rows = session.exec(
        select(LoopItem, Advertisement)
        .join(Advertisement, col(Advertisement.id) == col(LoopItem.ad_id))
        .where(LoopItem.loop_id == loop.id)
        .order_by(col(LoopItem.loop_order), col(LoopItem.id))
    ).all()

    return {
        "loop": loop,
        "advertisements": [
            {
                "ad_id": ad.id,
                "name": ad.name,
                "media_url": ad.media_url,
                "media_type": ad.media_type,
                "duration": ad.duration,
                "status": ad.status,
                "loop_order": item.loop_order,
            }
            for item, ad in rows
        ],
    }
