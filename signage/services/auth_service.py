"""Admin accounts and access tokens."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from signage.config import settings
from signage.errors import AuthError, ConflictError, ValidationError
from signage.models.user import User
from signage.utils.security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

PASSWORD_MIN = 8


def register_user(email: str, name: str, password: str, session: Session, role: str = "admin") -> User:
    email = (email or "").strip().lower()
    if "@" not in email:
        raise ValidationError("A valid email is required")
    if len(password or "") < PASSWORD_MIN:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN} characters")

    user = User(email=email, name=(name or email).strip(), password_hash=hash_password(password), role=role)
    session.add(user)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError("Email is already registered")
    session.refresh(user)
    logger.info("User %s registered", user.id)
    return user


def login(email: str, password: str, session: Session) -> dict:
    user = session.exec(select(User).where(User.email == (email or "").strip().lower())).first()
    if not user or not verify_password(password, user.password_hash):
        raise AuthError("Invalid email or password")
    return {
        "access_token": create_access_token(user.id, user.role),
        "user_id": user.id,
        "role": user.role,
    }


def ensure_bootstrap_admin(session: Session) -> User | None:
    """Create the configured initial admin if it does not exist yet."""
    if not (settings.bootstrap_admin_email and settings.bootstrap_admin_password):
        return None
    email = settings.bootstrap_admin_email.strip().lower()
    user = session.exec(select(User).where(User.email == email)).first()
    if user:
        return user
    return register_user(email, "Administrator", settings.bootstrap_admin_password, session)
