"""Display endpoints: device self-service (token auth) and admin management."""

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from signage.api.deps import Pagination, get_pagination, require_admin
from signage.database import get_session
from signage.models.display import Display
from signage.models.user import User
from signage.schemas.display import (
    AssignLoopRequest,
    Configuration,
    DisplayCreateRequest,
    DisplayListResponse,
    DisplayLoginResponse,
    DisplayResponse,
    DisplayStatusResponse,
    DisplayUpdateRequest,
    PasswordLoginRequest,
    PlaylistAd,
    PlaylistLoop,
    PlaylistResponse,
    RefreshCheckResponse,
    RegisterRequest,
    RegisterResponse,
    ReportStatusRequest,
    Resolution,
    TokenLoginRequest,
)
from signage.services import display_service, registration_service
from signage.services.liveness_service import actual_status_of, report_heartbeat
from signage.utils.timeutil import isoformat

router = APIRouter(prefix="/displays", tags=["displays"])


def _resolution(display: Display) -> Resolution:
    return Resolution(width=display.resolution_width, height=display.resolution_height)


def _configuration(display: Display) -> Configuration:
    return Configuration(
        brightness=display.brightness,
        volume=display.volume,
        refresh_rate=display.refresh_rate,
        orientation=display.orientation,
    )


def _display_response(display: Display) -> DisplayResponse:
    return DisplayResponse(
        id=display.id,
        display_name=display.display_name,
        location=display.location,
        status=display.status,
        actual_status=actual_status_of(display),
        is_connected=display.is_connected,
        last_seen=isoformat(display.last_seen),
        current_ad=display.current_ad,
        resolution=_resolution(display),
        configuration=_configuration(display),
        current_loop=display.current_loop,
        assigned_admin=display.assigned_admin,
        connection_token=display.connection_token,
        firmware_version=display.firmware_version,
        created_at=isoformat(display.created_at),
    )


def _login_response(display: Display) -> DisplayLoginResponse:
    return DisplayLoginResponse(
        display_id=display.id,
        connection_token=display.connection_token,
        display_name=display.display_name,
        location=display.location,
        status=display.status,
    )


# --- Device-facing (no user session, the connection token is the credential) ---

@router.post("/register-self", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register_self(request: RegisterRequest, session: Session = Depends(get_session)):
    """Self-register a display. It stays pending until an admin approves it."""
    display, connection_request = registration_service.register_display(
        display_name=request.display_name,
        location=request.location,
        session=session,
        display_id=request.display_id,
        password=request.password,
        resolution=request.resolution,
        device_info=request.device_info,
    )
    return RegisterResponse(
        display_id=display.id,
        connection_token=display.connection_token,
        display_name=display.display_name,
        location=display.location,
        status=display.status,
        request_id=connection_request.id,
        is_pending_approval=True,
    )


@router.get("/by-token/{token}", response_model=DisplayStatusResponse)
def display_by_token(token: str, session: Session = Depends(get_session)):
    """Polled by devices to learn whether they were approved."""
    result = registration_service.poll_status(token, session)
    display = result["display"]
    return DisplayStatusResponse(
        display_id=display.id,
        display_name=display.display_name,
        location=display.location,
        status=display.status,
        is_connected=display.is_connected,
        resolution=_resolution(display),
        configuration=_configuration(display),
        current_loop=display.current_loop,
        assigned_admin=display.assigned_admin,
        connection_request_status=result["connection_request_status"],
        rejection_reason=result["rejection_reason"],
    )


@router.post("/report-status")
def report_status(request: ReportStatusRequest, session: Session = Depends(get_session)):
    """Heartbeat from a display."""
    report_heartbeat(
        request.connection_token,
        session,
        reported_status=request.status,
        current_ad=request.current_ad_playing,
    )
    return {"ok": True}


@router.post("/login", response_model=DisplayLoginResponse)
def login_display_with_password(request: PasswordLoginRequest, session: Session = Depends(get_session)):
    display = registration_service.login_with_password(request.display_id, request.password, session)
    return _login_response(display)


@router.post("/login-display", response_model=DisplayLoginResponse)
def login_display_with_token(request: TokenLoginRequest, session: Session = Depends(get_session)):
    display = registration_service.login_with_token(request.display_id, request.connection_token, session)
    return _login_response(display)


@router.get("/loop/{token}", response_model=PlaylistResponse)
def playlist_for_display(token: str, session: Session = Depends(get_session)):
    """Current loop and its advertisements in play order."""
    result = display_service.loop_for_token(token, session)
    loop = result["loop"]
    return PlaylistResponse(
        loop=PlaylistLoop(
            loop_id=loop.id,
            loop_name=loop.loop_name,
            rotation_type=loop.rotation_type,
            total_duration=loop.total_duration,
        ) if loop else None,
        advertisements=[PlaylistAd(**ad) for ad in result["advertisements"]],
    )


@router.get("/check-refresh/{token}", response_model=RefreshCheckResponse)
def check_refresh(token: str, session: Session = Depends(get_session)):
    return RefreshCheckResponse(should_refresh=display_service.consume_refresh_flag(token, session))


# --- Admin ---

@router.post("", response_model=DisplayResponse, status_code=status.HTTP_201_CREATED)
def create_display(
    request: DisplayCreateRequest,
    user: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    """Create a display already assigned to the caller."""
    display = display_service.create_display(
        admin_id=user.id,
        display_id=request.display_id,
        display_name=request.display_name,
        location=request.location,
        session=session,
        resolution=request.resolution,
    )
    return _display_response(display)


@router.get("", response_model=DisplayListResponse)
def list_displays(
    status_filter: str | None = Query(default=None, alias="status"),
    pagination: Pagination = Depends(get_pagination),
    user: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    """List the caller's displays. Pending registrations are not included."""
    result = display_service.list_displays(
        user.id, session, status=status_filter, page=pagination.page, limit=pagination.limit
    )
    return DisplayListResponse(
        displays=[_display_response(d) for d in result["displays"]],
        current_page=result["current_page"],
        total_pages=result["total_pages"],
        page_size=result["page_size"],
        total=result["total"],
    )


@router.get("/{display_id}", response_model=DisplayResponse)
def get_display(
    display_id: str,
    user: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    return _display_response(display_service.get_owned_display(display_id, user.id, session))


@router.put("/{display_id}", response_model=DisplayResponse)
def update_display(
    display_id: str,
    request: DisplayUpdateRequest,
    user: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    display = display_service.update_display(
        display_id,
        user.id,
        session,
        display_name=request.display_name,
        location=request.location,
        status=request.status,
        resolution=request.resolution,
        configuration=request.configuration.model_dump(exclude_none=True) if request.configuration else None,
    )
    return _display_response(display)


@router.delete("/{display_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_display(
    display_id: str,
    user: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    display_service.delete_display(display_id, user.id, session)


@router.put("/{display_id}/assign-loop", response_model=DisplayResponse)
def assign_loop(
    display_id: str,
    request: AssignLoopRequest,
    user: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    return _display_response(display_service.assign_loop(display_id, request.loop_id, user.id, session))


@router.post("/{display_id}/trigger-refresh", response_model=DisplayResponse)
def trigger_refresh(
    display_id: str,
    user: User = Depends(require_admin),
    session: Session = Depends(get_session),
):
    return _display_response(display_service.trigger_refresh(display_id, user.id, session))
