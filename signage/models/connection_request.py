"""Display connection request model."""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel

from signage.utils.security import generate_request_id


class ConnectionRequest(SQLModel, table=True):
    __tablename__ = "connection_requests"
    __table_args__ = (
        # At most one pending request per display
        Index(
            "uq_connection_requests_pending_display",
            "display_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
    )

    id: str = Field(default_factory=generate_request_id, primary_key=True)
    # No FK: requests outlive the displays they refer to
    display_id: str = Field(index=True)
    device_info: Optional[str] = None  # JSON
    status: str = Field(default="pending", index=True)  # 'pending' | 'approved' | 'rejected'
    requested_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    responded_at: Optional[datetime] = None
    responded_by: Optional[str] = Field(default=None, foreign_key="users.id")
    rejection_reason: Optional[str] = Field(default=None, max_length=500)
