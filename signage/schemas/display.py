"""Display request/response schemas."""

from typing import Any, Optional

from pydantic import BaseModel


class Resolution(BaseModel):
    width: int
    height: int


class Configuration(BaseModel):
    brightness: int
    volume: int
    refresh_rate: int
    orientation: str


class ConfigurationUpdate(BaseModel):
    brightness: Optional[int] = None
    volume: Optional[int] = None
    refresh_rate: Optional[int] = None
    orientation: Optional[str] = None


# --- Device-facing ---

class RegisterRequest(BaseModel):
    display_name: str
    location: str
    display_id: Optional[str] = None
    password: Optional[str] = None
    resolution: Optional[dict[str, Any]] = None
    device_info: Optional[dict[str, Any]] = None


class RegisterResponse(BaseModel):
    display_id: str
    connection_token: str
    display_name: str
    location: str
    status: str
    request_id: str
    is_pending_approval: bool


class DisplayStatusResponse(BaseModel):
    display_id: str
    display_name: str
    location: str
    status: str
    is_connected: bool
    resolution: Resolution
    configuration: Configuration
    current_loop: Optional[str]
    assigned_admin: Optional[str]
    connection_request_status: Optional[str]
    rejection_reason: Optional[str]


class ReportStatusRequest(BaseModel):
    connection_token: str
    status: Optional[str] = None
    current_ad_playing: Optional[str] = None


class PasswordLoginRequest(BaseModel):
    display_id: str
    password: str


class TokenLoginRequest(BaseModel):
    display_id: str
    connection_token: str


class DisplayLoginResponse(BaseModel):
    display_id: str
    connection_token: str
    display_name: str
    location: str
    status: str


class PlaylistAd(BaseModel):
    ad_id: str
    name: str
    media_url: str
    media_type: str
    duration: int
    status: str
    loop_order: int


class PlaylistLoop(BaseModel):
    loop_id: str
    loop_name: str
    rotation_type: str
    total_duration: int


class PlaylistResponse(BaseModel):
    loop: Optional[PlaylistLoop]
    advertisements: list[PlaylistAd]


class RefreshCheckResponse(BaseModel):
    should_refresh: bool


# --- Admin-facing ---

class DisplayCreateRequest(BaseModel):
    display_id: str
    display_name: str
    location: str
    resolution: Optional[dict[str, Any]] = None


class DisplayUpdateRequest(BaseModel):
    display_name: Optional[str] = None
    location: Optional[str] = None
    status: Optional[str] = None
    resolution: Optional[dict[str, Any]] = None
    configuration: Optional[ConfigurationUpdate] = None


class AssignLoopRequest(BaseModel):
    loop_id: Optional[str] = None


class DisplayResponse(BaseModel):
    id: str
    display_name: str
    location: str
    status: str
    actual_status: str
    is_connected: bool
    last_seen: Optional[str]
    current_ad: Optional[str]
    resolution: Resolution
    configuration: Configuration
    current_loop: Optional[str]
    assigned_admin: Optional[str]
    connection_token: str
    firmware_version: str
    created_at: str


class DisplayListResponse(BaseModel):
    displays: list[DisplayResponse]
    current_page: int
    total_pages: int
    page_size: int
    total: int


class DisplaySummaryRow(BaseModel):
    display_id: str
    display_name: str
    location: str
    status: str
    stored_status: str
    is_connected: bool
    last_seen: Optional[str]
    resolution: str


class DisplaySummaryResponse(BaseModel):
    total_displays: int
    online_count: int
    offline_count: int
    inactive_count: int
    displays: list[DisplaySummaryRow]
