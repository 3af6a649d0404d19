"""Display model."""

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class Display(SQLModel, table=True):
    __tablename__ = "displays"

    # displayId: operator-chosen or generated
    id: str = Field(primary_key=True)
    display_name: str
    location: str

    # Credentials; the token never changes once issued
    connection_token: str = Field(unique=True, index=True)
    password_hash: Optional[str] = None

    # None until an admin approves the registration
    assigned_admin: Optional[str] = Field(default=None, foreign_key="users.id", index=True)

    # Liveness
    status: str = Field(default="offline")  # 'online' | 'offline' | 'inactive'
    last_seen: Optional[datetime] = None
    is_connected: bool = Field(default=False)
    current_ad: Optional[str] = None

    # Presentation
    resolution_width: int = Field(default=1920)
    resolution_height: int = Field(default=1080)
    brightness: int = Field(default=100)
    volume: int = Field(default=50)
    refresh_rate: int = Field(default=60)  # Hz
    orientation: str = Field(default="landscape")  # 'portrait' | 'landscape'
    firmware_version: str = Field(default="1.0.0")

    current_loop: Optional[str] = None  # loops.id, may dangle after loop deletion
    refresh_requested: bool = Field(default=False)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_pending(self) -> bool:
        return self.assigned_admin is None
