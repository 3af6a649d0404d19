"""Advertisement store used by loops and the display player."""

import logging
from datetime import datetime, timezone

from sqlmodel import Session, col, select

from signage.errors import ForbiddenError, NotFoundError, ValidationError
from signage.models.advertisement import Advertisement

logger = logging.getLogger(__name__)

MEDIA_TYPES = ("image", "video")
AD_STATUSES = ("active", "scheduled", "paused", "expired", "draft")
DURATION_MIN, DURATION_MAX = 1, 300


def _check_duration(duration: int) -> int:
    if not isinstance(duration, int) or not DURATION_MIN <= duration <= DURATION_MAX:
        raise ValidationError(
            f"Duration must be between {DURATION_MIN} and {DURATION_MAX} seconds"
        )
    return duration


def _check_status(status: str) -> str:
    if status not in AD_STATUSES:
        raise ValidationError(f"Unknown advertisement status: {status}")
    return status


def create_ad(
    owner_id: str,
    name: str,
    media_url: str,
    media_type: str,
    duration: int,
    session: Session,
    status: str = "active",
    description: str = "",
) -> Advertisement:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Advertisement name is required")
    if not media_url:
        raise ValidationError("Media URL is required")
    if media_type not in MEDIA_TYPES:
        raise ValidationError(f"Media type must be one of {', '.join(MEDIA_TYPES)}")

    ad = Advertisement(
        owner_id=owner_id,
        name=name,
        media_url=media_url,
        media_type=media_type,
        duration=_check_duration(duration),
        status=_check_status(status),
        description=description or "",
    )
    session.add(ad)
    session.commit()
    session.refresh(ad)
    logger.info("Advertisement %s created by %s", ad.id, owner_id)
    return ad


def list_ads(owner_id: str, session: Session, status: str | None = None) -> list[Advertisement]:
    query = select(Advertisement).where(Advertisement.owner_id == owner_id)
    if status:
        query = query.where(Advertisement.status == _check_status(status))
    return list(session.exec(query.order_by(col(Advertisement.created_at).desc())).all())


def get_owned_ad(ad_id: str, owner_id: str, session: Session) -> Advertisement:
    ad = session.get(Advertisement, ad_id)
    if not ad:
        raise NotFoundError("Advertisement not found")
    if ad.owner_id != owner_id:
        raise ForbiddenError("You do not have permission to access this advertisement")
    return ad


def update_ad(
    ad_id: str,
    owner_id: str,
    session: Session,
    name: str | None = None,
    duration: int | None = None,
    description: str | None = None,
    status: str | None = None,
) -> Advertisement:
    """Edit an advertisement. Loops keep the total duration they cached."""
    ad = get_owned_ad(ad_id, owner_id, session)
    if name:
        ad.name = name.strip()
    if duration is not None:
        ad.duration = _check_duration(duration)
    if description is not None:
        ad.description = description
    if status:
        ad.status = _check_status(status)
    ad.updated_at = datetime.now(timezone.utc)
    session.add(ad)
    session.commit()
    session.refresh(ad)
    return ad
