"""Advertisement model."""

import secrets
from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


class Advertisement(SQLModel, table=True):
    __tablename__ = "advertisements"

    id: str = Field(default_factory=lambda: f"ad_{secrets.token_hex(4)}", primary_key=True)
    owner_id: str = Field(foreign_key="users.id", index=True)
    name: str
    media_url: str
    media_type: str  # 'image' | 'video'
    duration: int  # seconds, 1-300
    status: str = Field(default="active")  # 'active' | 'scheduled' | 'paused' | 'expired' | 'draft'
    description: str = Field(default="")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
