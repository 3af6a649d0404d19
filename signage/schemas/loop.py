"""Loop (playlist) schemas."""

from typing import Optional

from pydantic import BaseModel


class LoopItemIn(BaseModel):
    ad_id: str
    loop_order: int


class LoopCreateRequest(BaseModel):
    display_id: str
    loop_name: str
    advertisements: list[LoopItemIn]
    rotation_type: Optional[str] = None
    description: Optional[str] = None


class LoopUpdateRequest(BaseModel):
    loop_name: Optional[str] = None
    description: Optional[str] = None
    rotation_type: Optional[str] = None
    advertisements: Optional[list[LoopItemIn]] = None


class LoopReorderRequest(BaseModel):
    advertisements: list[LoopItemIn]


class LoopResponse(BaseModel):
    id: str
    display_id: str
    loop_name: str
    description: str
    rotation_type: str
    total_duration: int
    is_active: bool
    advertisements: list[LoopItemIn]
