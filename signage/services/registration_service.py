"""Display self-registration and device-side lookups.

A registering device gets an unassigned Display plus a pending
ConnectionRequest, created in one transaction. The device then polls with
its connection token until an admin resolves the request.
"""

import json
import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from signage.config import settings
from signage.errors import AuthError, ConflictError, NotFoundError, ValidationError
from signage.models.connection_request import ConnectionRequest
from signage.models.display import Display
from signage.utils import security

logger = logging.getLogger(__name__)

NAME_MIN, NAME_MAX = 2, 100
LOCATION_MIN, LOCATION_MAX = 2, 200
DISPLAY_ID_MIN, DISPLAY_ID_MAX = 3, 30
PASSWORD_MIN = 6
RESOLUTION_MIN = 100


def _check_length(label: str, value: str, low: int, high: int) -> str:
    value = (value or "").strip()
    if not low <= len(value) <= high:
        raise ValidationError(f"{label} must be between {low} and {high} characters")
    return value


def validate_resolution(resolution: dict | None) -> tuple[int, int]:
    """Return (width, height); defaults to 1920x1080 when not given."""
    if not resolution:
        return 1920, 1080
    width = resolution.get("width")
    height = resolution.get("height")
    if (
        not isinstance(width, int)
        or not isinstance(height, int)
        or width < RESOLUTION_MIN
        or height < RESOLUTION_MIN
    ):
        raise ValidationError(
            f"Resolution must include width and height (minimum {RESOLUTION_MIN}px each)"
        )
    return width, height


def validate_display_id(display_id: str) -> str:
    display_id = _check_length("Display ID", display_id, DISPLAY_ID_MIN, DISPLAY_ID_MAX)
    if any(ch.isspace() for ch in display_id):
        raise ValidationError("Display ID must not contain whitespace")
    return display_id


def pending_request_for(session: Session, display_id: str) -> ConnectionRequest | None:
    return session.exec(
        select(ConnectionRequest).where(
            ConnectionRequest.display_id == display_id,
            ConnectionRequest.status == "pending",
        )
    ).first()


def latest_request_for(session: Session, display_id: str) -> ConnectionRequest | None:
    return session.exec(
        select(ConnectionRequest)
        .where(ConnectionRequest.display_id == display_id)
        .order_by(col(ConnectionRequest.requested_at).desc())
    ).first()


def ensure_pending_request(
    session: Session,
    display: Display,
    device_info: dict | None = None,
) -> ConnectionRequest:
    """Attach a pending request to `display` inside the current transaction.

    If the insert hits a uniqueness violation because a pending request for
    this display already exists, that request is returned instead. A
    collision on the request id itself is retried with a fresh id.
    """
    for attempt in range(1, settings.registration_max_retries + 1):
        request = ConnectionRequest(
            id=security.generate_request_id(),
            display_id=display.id,
            device_info=json.dumps(device_info) if device_info else None,
        )
        try:
            with session.begin_nested():
                session.add(request)
        except IntegrityError:
            existing = pending_request_for(session, display.id)
            if existing:
                logger.warning(
                    "Reusing pending request %s for display %s", existing.id, display.id
                )
                return existing
            logger.warning(
                "Request id collision for display %s (attempt %d), retrying",
                display.id,
                attempt,
            )
            continue
        return request

    raise ConflictError("Could not create a connection request, try again")


def register_display(
    display_name: str,
    location: str,
    session: Session,
    display_id: str | None = None,
    password: str | None = None,
    resolution: dict | None = None,
    device_info: dict | None = None,
) -> tuple[Display, ConnectionRequest]:
    """Self-registration. Returns the new unassigned display and its pending request."""
    display_name = _check_length("Display name", display_name, NAME_MIN, NAME_MAX)
    location = _check_length("Location", location, LOCATION_MIN, LOCATION_MAX)
    chosen_id = validate_display_id(display_id) if display_id else None
    width, height = validate_resolution(resolution)
    if password is not None and len(password) < PASSWORD_MIN:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN} characters")
    password_hash = security.hash_password(password) if password else None

    if chosen_id and session.get(Display, chosen_id):
        raise ConflictError("Display ID already exists. Choose a different one")

    firmware = (device_info or {}).get("browserVersion") or (device_info or {}).get("firmwareVersion")

    for attempt in range(1, settings.registration_max_retries + 1):
        display = Display(
            id=chosen_id or security.generate_display_id(),
            display_name=display_name,
            location=location,
            connection_token=security.generate_connection_token(),
            password_hash=password_hash,
            assigned_admin=None,
            status="offline",
            is_connected=False,
            resolution_width=width,
            resolution_height=height,
            firmware_version=firmware or "Web",
        )
        try:
            with session.begin_nested():
                session.add(display)
        except IntegrityError:
            if chosen_id and session.get(Display, chosen_id):
                session.rollback()
                raise ConflictError("Display ID already exists. Choose a different one")
            logger.warning("Display id/token collision on registration (attempt %d)", attempt)
            continue

        request = ensure_pending_request(session, display, device_info)
        session.commit()
        session.refresh(display)
        session.refresh(request)
        logger.info("Display %s registered, awaiting approval (request %s)", display.id, request.id)
        return display, request

    session.rollback()
    raise ConflictError("Could not allocate a unique display identifier")


def get_display_by_token(connection_token: str, session: Session) -> Display:
    if not connection_token:
        raise ValidationError("Connection token is required")
    display = session.exec(
        select(Display).where(Display.connection_token == connection_token)
    ).first()
    if not display:
        raise NotFoundError("Display not found")
    return display


def poll_status(connection_token: str, session: Session) -> dict:
    """What a device needs to know while waiting for, or after, approval."""
    display = get_display_by_token(connection_token, session)
    request = latest_request_for(session, display.id)
    return {
        "display": display,
        "connection_request_status": request.status if request else None,
        "rejection_reason": request.rejection_reason if request else None,
    }


def login_with_password(display_id: str, password: str, session: Session) -> Display:
    display = session.get(Display, (display_id or "").strip())
    if not display or not display.password_hash:
        raise AuthError("Invalid display ID or password")
    if not security.verify_password(password, display.password_hash):
        raise AuthError("Invalid display ID or password")
    logger.info("Display %s logged in with password", display.id)
    return display


def login_with_token(display_id: str, connection_token: str, session: Session) -> Display:
    if not display_id or not connection_token:
        raise ValidationError("Display ID and connection token are required")
    display = session.exec(
        select(Display).where(
            Display.id == display_id,
            Display.connection_token == connection_token,
        )
    ).first()
    if not display:
        raise NotFoundError("Display not found. Invalid display ID or connection token")
    return display
