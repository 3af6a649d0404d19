"""User model (admins who own displays)."""

import secrets
from datetime import datetime, timezone

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: str = Field(default_factory=lambda: f"usr_{secrets.token_hex(4)}", primary_key=True)
    email: str = Field(unique=True, index=True)
    name: str
    password_hash: str
    role: str = Field(default="admin")  # 'admin' | 'advertiser'
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
