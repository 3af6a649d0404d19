"""Connection request schemas."""

from typing import Any, Optional

from pydantic import BaseModel


class RejectRequest(BaseModel):
    rejection_reason: Optional[str] = None


class ConnectionRequestResponse(BaseModel):
    id: str
    display_id: str
    status: str
    device_info: Optional[dict[str, Any]]
    requested_at: str
    responded_at: Optional[str]
    responded_by: Optional[str]
    rejection_reason: Optional[str]


class PurgeResponse(BaseModel):
    purged: list[str]
