"""Loop (playlist) models."""

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel

from signage.utils.security import generate_loop_id


class Loop(SQLModel, table=True):
    __tablename__ = "loops"

    id: str = Field(default_factory=generate_loop_id, primary_key=True)
    display_id: str = Field(index=True)  # no FK, loops may be orphaned
    loop_name: str
    description: str = Field(default="")
    rotation_type: str = Field(default="sequential")  # 'sequential' | 'random' | 'scheduled'
    # Sum of ad durations when the ad set was last written; not kept in sync with ad edits
    total_duration: int = Field(default=0)
    is_active: bool = Field(default=False)  # the display's current loop
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class LoopItem(SQLModel, table=True):
    __tablename__ = "loop_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    loop_id: str = Field(foreign_key="loops.id", index=True)
    ad_id: str = Field(foreign_key="advertisements.id", index=True)
    loop_order: int
