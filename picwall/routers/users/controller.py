import re
import time
import random
from typing import List, Optional

from fastapi import Depends, Request, status
from fastapi.security import OAuth2PasswordBearer
from loguru import logger as logging
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from picwall.config import SESSION_COOKIE_NAME
from picwall.database import get_db, utcnow
from picwall.utils.errors import AppError, ErrorSeverity, ErrorSource, handle_auth_error, handle_db_error
from picwall.utils.jwt import get_user_id_from_token
from .models import Account, Follow, User

USERNAME_MAX_LENGTH = 40
# size of users.username
USERNAME_COLUMN_LENGTH = 50
UNIQUE_USERNAME_ATTEMPTS = 5

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)


# ============================================
# SESSION DEPENDENCIES
# ============================================
def _session_token(request: Request, bearer_token: Optional[str]) -> Optional[str]:
    return bearer_token or request.cookies.get(SESSION_COOKIE_NAME)


def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the signed-in user from the bearer header or the session cookie.
    """
    raw_token = _session_token(request, token)
    if not raw_token:
        raise AppError(
            "Unauthorized",
            source=ErrorSource.AUTH,
            severity=ErrorSeverity.WARNING,
            code="AUTH_UNAUTHORIZED",
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    user_id = get_user_id_from_token(raw_token)
    user = db.get(User, user_id)
    if not user:
        raise handle_auth_error(LookupError("User not found"), "resolve session user")
    return user


def get_optional_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Same as get_current_user, but anonymous callers get None."""
    raw_token = _session_token(request, token)
    if not raw_token:
        return None
    try:
        user_id = get_user_id_from_token(raw_token)
    except AppError as e:
        logging.debug("Ignoring unusable session token: {}", e.code)
        return None
    return db.get(User, user_id)


# ============================================
# LOOKUPS
# ============================================
def find_user_by_email(db: Session, email: str) -> Optional[User]:
    return (
        db.query(User)
        .filter(func.lower(User.email) == (email or "").strip().lower())
        .first()
    )


def username_taken(db: Session, username: str, exclude_user_id: Optional[int] = None) -> bool:
    query = db.query(User.id).filter(User.username == username)
    if exclude_user_id is not None:
        query = query.filter(User.id != exclude_user_id)
    return query.first() is not None


def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise AppError(
            "User not found",
            source=ErrorSource.API,
            severity=ErrorSeverity.WARNING,
            code="USER_NOT_FOUND",
            status_code=status.HTTP_404_NOT_FOUND,
        )
    return user


# ============================================
# USERNAMES
# ============================================
def base_username(email: Optional[str], name: Optional[str], user_id: Optional[int] = None) -> str:
    """
    Derive a username candidate: email local part, else the squashed name,
    else ``user_<id prefix>``.
    """
    candidate = ""
    if email:
        candidate = email.split("@")[0]
    elif name:
        candidate = re.sub(r"\s+", "", name).lower()
    if not candidate:
        suffix = str(user_id)[:6] if user_id else str(int(time.time() * 1000))
        candidate = f"user_{suffix}"
    return candidate[:USERNAME_MAX_LENGTH]


def generate_unique_username(db: Session, base: str, exclude_user_id: Optional[int] = None) -> str:
    if not username_taken(db, base, exclude_user_id):
        return base

    for _ in range(UNIQUE_USERNAME_ATTEMPTS):
        candidate = f"{base[:USERNAME_COLUMN_LENGTH - 4]}{random.randint(1000, 9999)}"
        if not username_taken(db, candidate, exclude_user_id):
            return candidate

    millis = str(int(time.time() * 1000))
    return f"{base[:USERNAME_COLUMN_LENGTH - len(millis) - 1]}_{millis}"


def sync_user_profile(db: Session, user: User) -> User:
    """Fill in a missing username and stamp email_verified; commit only if something changed."""
    needs_update = False

    if not user.username:
        base = base_username(user.email, user.name, user.id)
        user.username = generate_unique_username(db, base, exclude_user_id=user.id)
        needs_update = True

    if not user.email_verified:
        user.email_verified = utcnow()
        needs_update = True

    if needs_update:
        try:
            db.commit()
            db.refresh(user)
        except SQLAlchemyError as e:
            db.rollback()
            raise handle_db_error(e, "sync user profile")
        logging.info("Updated user profile {} username: {}", user.id, user.username)

    return user


# ============================================
# OAUTH PROFILE MAPPING
# ============================================
def map_github_profile(profile: dict) -> dict:
    provider_id = str(profile["id"])
    return {
        "id": provider_id,
        "name": profile.get("name") or profile.get("login"),
        "email": profile.get("email"),
        "image": profile.get("avatar_url"),
        "username": profile.get("login") or f"github_{provider_id}",
    }


def map_google_profile(profile: dict) -> dict:
    email = profile.get("email")
    return {
        "id": str(profile["sub"]),
        "name": profile.get("name"),
        "email": email,
        "image": profile.get("picture"),
        "username": email.split("@")[0] if email else f"google_{profile['sub']}",
    }


OAUTH_PROFILE_MAPPERS = {
    "github": map_github_profile,
    "google": map_google_profile,
}


def map_oauth_profile(provider: str, profile: dict) -> dict:
    mapper = OAUTH_PROFILE_MAPPERS.get(provider)
    if mapper is None:
        raise AppError(
            f"Unsupported OAuth provider: {provider}",
            source=ErrorSource.AUTH,
            severity=ErrorSeverity.WARNING,
            code="AUTH_UNKNOWN_PROVIDER",
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    return mapper(profile)


def sync_oauth_user(db: Session, provider: str, profile: dict) -> User:
    """
    Link a provider profile to a local user, creating the user when needed.

    Lookup order is the linked account, then a user with the same email.
    """
    mapped = map_oauth_profile(provider, profile)

    account = (
        db.query(Account)
        .filter(Account.provider == provider, Account.provider_account_id == mapped["id"])
        .first()
    )
    user = account.user if account else None

    if user is None and mapped["email"]:
        user = find_user_by_email(db, mapped["email"])

    try:
        if user is None:
            if not mapped["email"]:
                raise AppError(
                    "OAuth profile does not expose an email address",
                    source=ErrorSource.AUTH,
                    severity=ErrorSeverity.WARNING,
                    code="AUTH_OAUTH_NO_EMAIL",
                    status_code=status.HTTP_400_BAD_REQUEST,
                )
            user = User(
                name=mapped["name"] or mapped["email"].split("@")[0],
                email=mapped["email"],
                image=mapped["image"],
            )
            db.add(user)
            db.flush()
            logging.info("Created user {} from {} profile", user.id, provider)

        if account is None:
            db.add(Account(user=user, provider=provider, provider_account_id=mapped["id"]))
            logging.info("Linked {} account to user {}", provider, user.id)

        # an uploaded picture wins over the provider avatar
        if mapped["image"] and not user.image_key and user.image != mapped["image"]:
            user.image = mapped["image"]

        if not user.username:
            base = (mapped["username"] or base_username(user.email, user.name, user.id))[:USERNAME_MAX_LENGTH]
            user.username = generate_unique_username(db, base, exclude_user_id=user.id)

        if not user.email_verified:
            user.email_verified = utcnow()

        db.commit()
        db.refresh(user)
    except AppError:
        db.rollback()
        raise
    except (SQLAlchemyError, ValueError) as e:
        db.rollback()
        raise handle_db_error(e, f"sync {provider} user")

    return user


# ============================================
# FOLLOW GRAPH
# ============================================
def follow_user(db: Session, follower: User, following_id: int) -> Follow:
    if follower.id == following_id:
        raise AppError(
            "You cannot follow yourself",
            source=ErrorSource.VALIDATION,
            severity=ErrorSeverity.WARNING,
            code="FOLLOW_SELF",
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    get_user_or_404(db, following_id)

    follow = Follow(follower_id=follower.id, following_id=following_id)
    db.add(follow)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AppError(
            "You are already following this user",
            source=ErrorSource.DATABASE,
            severity=ErrorSeverity.WARNING,
            code="DB_DUPLICATE_KEY",
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_db_error(e, "follow user")

    db.refresh(follow)
    logging.info("User {} now follows {}", follower.id, following_id)
    return follow


def unfollow_user(db: Session, follower: User, following_id: int) -> None:
    follow = (
        db.query(Follow)
        .filter(Follow.follower_id == follower.id, Follow.following_id == following_id)
        .first()
    )
    if not follow:
        raise AppError(
            "You are not following this user",
            source=ErrorSource.VALIDATION,
            severity=ErrorSeverity.WARNING,
            code="FOLLOW_NOT_FOUND",
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    db.delete(follow)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_db_error(e, "unfollow user")
    logging.info("User {} unfollowed {}", follower.id, following_id)


def following_ids(db: Session, user_id: int) -> List[int]:
    rows = db.query(Follow.following_id).filter(Follow.follower_id == user_id).all()
    return [row.following_id for row in rows]


def is_following(db: Session, follower_id: int, following_id: int) -> bool:
    return (
        db.query(Follow.id)
        .filter(Follow.follower_id == follower_id, Follow.following_id == following_id)
        .first()
        is not None
    )


def follow_counts(db: Session, user_id: int) -> dict:
    return {
        "followers": db.query(func.count(Follow.id)).filter(Follow.following_id == user_id).scalar(),
        "following": db.query(func.count(Follow.id)).filter(Follow.follower_id == user_id).scalar(),
    }
