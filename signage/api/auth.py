"""Admin authentication endpoints."""

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from signage.api.deps import get_current_user
from signage.database import get_session
from signage.models.user import User
from signage.schemas.auth import LoginRequest, LoginResponse, UserRegisterRequest, UserResponse
from signage.services.auth_service import login, register_user

router = APIRouter(prefix="/auth", tags=["auth"])


def _user_response(user: User) -> UserResponse:
    return UserResponse(id=user.id, email=user.email, name=user.name, role=user.role)


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(request: UserRegisterRequest, session: Session = Depends(get_session)):
    """Create an admin account."""
    user = register_user(request.email, request.name, request.password, session)
    return _user_response(user)


@router.post("/login", response_model=LoginResponse)
def login_user(request: LoginRequest, session: Session = Depends(get_session)):
    return LoginResponse(**login(request.email, request.password, session))


@router.get("/me", response_model=UserResponse)
def me(user: User = Depends(get_current_user)):
    return _user_response(user)
