"""Loop (playlist) store.

`Loop.total_duration` is recomputed whenever the advertisement set of a loop
is written. Later edits to an advertisement's duration do not propagate to
existing loops.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import delete
from sqlmodel import Session, col, select

from signage.errors import ForbiddenError, NotFoundError, ValidationError
from signage.models.advertisement import Advertisement
from signage.models.display import Display
from signage.models.loop import Loop, LoopItem
from signage.services.display_service import get_owned_display
from signage.utils import security

logger = logging.getLogger(__name__)

ROTATION_TYPES = ("sequential", "random", "scheduled")
LOOP_NAME_MIN = 3
DESCRIPTION_MAX = 500


def _validated_items(items: list[dict], session: Session) -> tuple[list[LoopItem], int]:
    """Turn [{ad_id, loop_order}] into LoopItems sorted by order, plus total duration."""
    if not items:
        raise ValidationError("At least one advertisement is required")

    validated = []
    total_duration = 0
    for item in items:
        ad_id = item.get("ad_id")
        loop_order = item.get("loop_order")
        if not ad_id or loop_order is None:
            raise ValidationError("Each advertisement must have ad_id and loop_order")
        ad = session.get(Advertisement, ad_id)
        if not ad:
            raise NotFoundError(f"Advertisement {ad_id} not found")
        validated.append(LoopItem(loop_id="", ad_id=ad_id, loop_order=int(loop_order)))
        total_duration += ad.duration or 0

    # stable: equal orders keep submission order
    validated.sort(key=lambda i: i.loop_order)
    return validated, total_duration


def _replace_items(loop: Loop, items: list[LoopItem], session: Session) -> None:
    session.exec(delete(LoopItem).where(col(LoopItem.loop_id) == loop.id))
    for item in items:
        item.loop_id = loop.id
        session.add(item)


def _owned_loop(loop_id: str, admin_id: str, session: Session) -> Loop:
    loop = session.get(Loop, loop_id)
    if not loop:
        raise NotFoundError("Loop not found")
    display = session.get(Display, loop.display_id)
    if not display or display.assigned_admin != admin_id:
        raise ForbiddenError("You do not have permission to access this loop")
    return loop


def loop_items(loop_id: str, session: Session) -> list[LoopItem]:
    return list(
        session.exec(
            select(LoopItem)
            .where(LoopItem.loop_id == loop_id)
            .order_by(col(LoopItem.loop_order), col(LoopItem.id))
        ).all()
    )


def create_loop(
    admin_id: str,
    display_id: str,
    loop_name: str,
    advertisements: list[dict],
    session: Session,
    rotation_type: str | None = None,
    description: str | None = None,
) -> Loop:
    loop_name = (loop_name or "").strip()
    if len(loop_name) < LOOP_NAME_MIN:
        raise ValidationError(f"Loop name must be at least {LOOP_NAME_MIN} characters")
    rotation_type = rotation_type or "sequential"
    if rotation_type not in ROTATION_TYPES:
        raise ValidationError(f"Unknown rotation type: {rotation_type}")
    description = (description or "").strip()
    if len(description) > DESCRIPTION_MAX:
        raise ValidationError(f"Description must be at most {DESCRIPTION_MAX} characters")

    display = get_owned_display(display_id, admin_id, session)
    items, total_duration = _validated_items(advertisements, session)

    loop = Loop(
        id=security.generate_loop_id(),
        display_id=display.id,
        loop_name=loop_name,
        description=description,
        rotation_type=rotation_type,
        total_duration=total_duration,
    )
    session.add(loop)
    session.flush()
    _replace_items(loop, items, session)
    session.commit()
    session.refresh(loop)
    logger.info(
        "Loop %s created for display %s: %d ads, %ds",
        loop.id, display.id, len(items), total_duration,
    )
    return loop


def list_loops(admin_id: str, session: Session, display_id: str | None = None) -> list[Loop]:
    if display_id:
        get_owned_display(display_id, admin_id, session)
        query = select(Loop).where(Loop.display_id == display_id)
    else:
        owned = select(Display.id).where(Display.assigned_admin == admin_id)
        query = select(Loop).where(col(Loop.display_id).in_(owned))
    return list(session.exec(query.order_by(col(Loop.created_at).desc())).all())


def get_loop(loop_id: str, admin_id: str, session: Session) -> Loop:
    return _owned_loop(loop_id, admin_id, session)


def update_loop(
    loop_id: str,
    admin_id: str,
    session: Session,
    loop_name: str | None = None,
    description: str | None = None,
    rotation_type: str | None = None,
    advertisements: list[dict] | None = None,
) -> Loop:
    loop = _owned_loop(loop_id, admin_id, session)

    if loop_name:
        loop_name = loop_name.strip()
        if len(loop_name) < LOOP_NAME_MIN:
            raise ValidationError(f"Loop name must be at least {LOOP_NAME_MIN} characters")
        loop.loop_name = loop_name
    if description is not None:
        if len(description.strip()) > DESCRIPTION_MAX:
            raise ValidationError(f"Description must be at most {DESCRIPTION_MAX} characters")
        loop.description = description.strip()
    if rotation_type:
        if rotation_type not in ROTATION_TYPES:
            raise ValidationError(f"Unknown rotation type: {rotation_type}")
        loop.rotation_type = rotation_type
    if advertisements:
        items, loop.total_duration = _validated_items(advertisements, session)
        _replace_items(loop, items, session)

    loop.updated_at = datetime.now(timezone.utc)
    session.add(loop)
    session.commit()
    session.refresh(loop)
    logger.info("Loop %s updated by %s", loop.id, admin_id)
    return loop


def reorder_loop(loop_id: str, admin_id: str, advertisements: list[dict], session: Session) -> Loop:
    loop = _owned_loop(loop_id, admin_id, session)
    items, loop.total_duration = _validated_items(advertisements, session)
    _replace_items(loop, items, session)
    loop.updated_at = datetime.now(timezone.utc)
    session.add(loop)
    session.commit()
    session.refresh(loop)
    return loop


def delete_loop(loop_id: str, admin_id: str, session: Session) -> None:
    """Delete a loop. Displays still pointing at it are left as they are."""
    loop = _owned_loop(loop_id, admin_id, session)
    session.exec(delete(LoopItem).where(col(LoopItem.loop_id) == loop.id))
    session.delete(loop)
    session.commit()
    logger.info("Loop %s deleted by %s", loop_id, admin_id)
