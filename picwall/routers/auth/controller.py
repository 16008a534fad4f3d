from typing import Optional

from fastapi import status
from loguru import logger as logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from picwall.routers.users.controller import (
    base_username, find_user_by_email, generate_unique_username, username_taken
)
from picwall.routers.users.models import User
from picwall.routers.users.models.users import EMAIL_PATTERN
from picwall.utils.errors import AppError, ErrorSeverity, ErrorSource, handle_auth_error, handle_db_error, log_error
from picwall.utils.jwt import BCRYPT_MAX_BYTES
from .schemas import RegisterSchema

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_BYTES = BCRYPT_MAX_BYTES

INVALID_CREDENTIALS_MESSAGE = "Invalid credentials"


def _validation_error(message: str, code: str, details: Optional[dict] = None) -> AppError:
    return AppError(
        message,
        source=ErrorSource.VALIDATION,
        severity=ErrorSeverity.WARNING,
        code=code,
        details=details,
        status_code=status.HTTP_400_BAD_REQUEST,
    )


def validate_registration(payload: RegisterSchema):
    if not payload.name or not payload.email or not payload.password:
        raise _validation_error(
            "Missing required fields",
            "VALIDATION_MISSING_FIELDS",
            {
                "missingName": not payload.name,
                "missingEmail": not payload.email,
                "missingPassword": not payload.password,
            },
        )
    if not EMAIL_PATTERN.match(payload.email):
        raise _validation_error("Invalid email format", "VALIDATION_INVALID_EMAIL", {"email": payload.email})
    if len(payload.password) < PASSWORD_MIN_LENGTH:
        raise _validation_error(
            f"Password must be at least {PASSWORD_MIN_LENGTH} characters long",
            "VALIDATION_WEAK_PASSWORD",
            {"passwordLength": len(payload.password)},
        )
    if len(payload.password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise _validation_error(
            f"Password must be at most {PASSWORD_MAX_BYTES} bytes long",
            "VALIDATION_PASSWORD_TOO_LONG",
        )


def register_user(db: Session, payload: RegisterSchema) -> User:
    """Validate a sign-up request and create the user with a hashed password."""
    validate_registration(payload)
    email = payload.email.strip()

    if find_user_by_email(db, email):
        raise AppError(
            "Email already in use",
            source=ErrorSource.AUTH,
            severity=ErrorSeverity.WARNING,
            code="AUTH_EMAIL_IN_USE",
            details={"email": email},
            status_code=status.HTTP_409_CONFLICT,
        )

    username = (payload.username or "").strip()
    if username and username_taken(db, username):
        raise AppError(
            "Username already taken",
            source=ErrorSource.AUTH,
            severity=ErrorSeverity.WARNING,
            code="AUTH_USERNAME_IN_USE",
            details={"username": username},
            status_code=status.HTTP_409_CONFLICT,
        )
    if not username:
        username = generate_unique_username(db, base_username(email, payload.name))

    try:
        user = User(name=payload.name, email=email, username=username)
        user.set_password(payload.password)
        db.add(user)
        db.commit()
        db.refresh(user)
    except (SQLAlchemyError, ValueError) as e:
        db.rollback()
        raise handle_db_error(e, "user registration")

    log_error(AppError(
        "User registered successfully",
        source=ErrorSource.AUTH,
        severity=ErrorSeverity.INFO,
        details={"userId": user.id, "email": user.email},
    ))
    return user


def authenticate_user(db: Session, email: Optional[str], password: Optional[str]) -> User:
    """
    Check email and password. Every failure answers the same 401 so that
    callers cannot probe which emails are registered.
    """
    user = find_user_by_email(db, email) if email else None
    if not user or not password or not user.verify_password(password):
        logging.warning("Login failed for {}", email)
        raise handle_auth_error(PermissionError(INVALID_CREDENTIALS_MESSAGE), "login")
    return user
