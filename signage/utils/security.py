"""Security utilities: JWT tokens, password hashing, identifier generation."""

import secrets
import uuid
from datetime import datetime, timedelta, timezone

import bcrypt
import jwt

from signage.config import settings


# --- Password Hashing ---

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(password: str, hashed: str) -> bool:
    if not hashed:
        return False
    return bcrypt.checkpw(password.encode(), hashed.encode())


# --- JWT Tokens ---

def create_access_token(user_id: str, role: str) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": user_id,
        "role": role,
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token. Raises jwt.PyJWTError on failure."""
    return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])


# --- Identifiers ---

def generate_display_id() -> str:
    """Server-chosen display identifier, e.g. DISP-3F9A01C2."""
    return f"DISP-{secrets.token_hex(4).upper()}"


def generate_connection_token() -> str:
    """Bearer secret a display uses instead of a user session."""
    return str(uuid.uuid4())


def generate_request_id() -> str:
    return f"REQ-{secrets.token_hex(6).upper()}"


def generate_loop_id() -> str:
    return f"LOOP-{secrets.token_hex(6).upper()}"
