# picwall/utils/jwt.py
import bcrypt
from typing import Optional
from jose import ExpiredSignatureError, JWTError, jwt
from datetime import datetime, timedelta, timezone
from fastapi import status
from picwall.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from picwall.utils.errors import AppError, ErrorSeverity, ErrorSource

BCRYPT_MAX_BYTES = 72


# Function to create access token
def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


# Function to verify access token
def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise AppError(
            "Session has expired. Please sign in again.",
            source=ErrorSource.AUTH,
            severity=ErrorSeverity.WARNING,
            code="AUTH_TOKEN_EXPIRED",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )
    except JWTError:
        raise AppError(
            "Could not validate credentials",
            source=ErrorSource.AUTH,
            severity=ErrorSeverity.WARNING,
            code="AUTH_INVALID_TOKEN",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )


def get_user_id_from_token(token: str) -> int:
    """
    Extracts the user id stored in the token subject.
    """
    payload = decode_access_token(token)
    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        raise AppError(
            "Could not validate credentials",
            source=ErrorSource.AUTH,
            severity=ErrorSeverity.WARNING,
            code="AUTH_INVALID_TOKEN",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )
    return int(subject)


def hash_password(raw_password: str) -> str:
    return bcrypt.hashpw(raw_password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(raw_password: str, password: str) -> bool:
    """Verifies the provided password against the stored hash."""
    raw_bytes = (raw_password or "").encode("utf-8")
    # bcrypt refuses inputs past 72 bytes; no stored hash can match them
    if not password or len(raw_bytes) > BCRYPT_MAX_BYTES:
        return False
    return bcrypt.checkpw(raw_bytes, password.encode("utf-8"))
