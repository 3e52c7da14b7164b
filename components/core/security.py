"""Security utilities for session tokens and PIN handling."""

from datetime import datetime, timedelta, timezone
from typing import Optional
import re
from jose import JWTError, jwt

from components.core.config import get_settings
from components.core.exceptions import ValidationError

settings = get_settings()

ALGORITHM = "HS256"
PIN_LENGTH = 4
_PIN_PATTERN = re.compile(r"^\d{%d}$" % PIN_LENGTH)


def is_valid_pin(pin: Optional[str]) -> bool:
    """Check that a PIN is exactly four digits."""
    return bool(pin) and _PIN_PATTERN.match(pin) is not None


def validate_pin(pin: Optional[str], field: str = "PIN") -> str:
    """Return the PIN or raise ValidationError if it is not four digits."""
    if not is_valid_pin(pin):
        raise ValidationError(f"{field} must be {PIN_LENGTH} digits.")
    return pin


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a new JWT access token."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def create_session_token(user_id: int, epoch: int) -> str:
    """Create a token bound to one session epoch."""
    return create_access_token({"sub": str(user_id), "epoch": epoch})


def verify_token(token: str) -> Optional[dict]:
    """Verify a JWT token and return its payload."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        return None
