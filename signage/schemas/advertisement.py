"""Advertisement schemas."""

from typing import Optional

from pydantic import BaseModel


class AdCreateRequest(BaseModel):
    name: str
    media_url: str
    media_type: str
    duration: int
    status: str = "active"
    description: str = ""


class AdUpdateRequest(BaseModel):
    name: Optional[str] = None
    duration: Optional[int] = None
    description: Optional[str] = None


class AdStatusRequest(BaseModel):
    status: str


class AdResponse(BaseModel):
    id: str
    name: str
    media_url: str
    media_type: str
    duration: int
    status: str
    description: str
