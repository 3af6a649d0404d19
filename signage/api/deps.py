"""Shared route dependencies: admin identity from a bearer JWT, and paging."""

from dataclasses import dataclass

import jwt
from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel import Session

from signage.config import settings
from signage.database import get_session
from signage.errors import AuthError, ForbiddenError
from signage.models.user import User
from signage.utils.security import decode_token

bearer_scheme = HTTPBearer()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User:
    try:
        claims = decode_token(credentials.credentials)
    except jwt.PyJWTError:
        raise AuthError("Invalid or expired token")

    if claims.get("type") != "access" or "sub" not in claims:
        raise AuthError("Invalid token type")

    user = session.get(User, claims["sub"])
    if not user:
        raise AuthError("Unknown user")
    return user


def require_admin(user: User = Depends(get_current_user)) -> User:
    """The caller's id is the adminId that displays get assigned to."""
    if user.role != "admin":
        raise ForbiddenError("Admin access required")
    return user


@dataclass
class Pagination:
    page: int
    limit: int


def get_pagination(
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
) -> Pagination:
    limit = min(limit or settings.default_page_size, settings.max_page_size)
    return Pagination(page=page, limit=limit)
