from fastapi import APIRouter, Body, Depends, Response, status
from loguru import logger as logging
from sqlalchemy.orm import Session

from picwall.config import ACCESS_TOKEN_EXPIRE_MINUTES, ENVIRONMENT, SESSION_COOKIE_NAME
from picwall.database import get_db
from picwall.routers.users.controller import get_current_user, sync_user_profile
from picwall.routers.users.models import User
from picwall.routers.users.schemas import SafeProfile, UserData
from picwall.utils.jwt import create_access_token
from picwall.utils.schemas import Envelope
from . import controller, schemas

# Defining the router
router = APIRouter(
    prefix="/api/auth",
    tags=["Auth"],
    responses={404: {"description": "Not found"}},
)


def issue_token(user: User) -> str:
    return create_access_token(data={"sub": str(user.id)})


# ----------------------
# Register
# ----------------------
@router.post("/register", response_model=Envelope[UserData], status_code=status.HTTP_201_CREATED)
def register(payload: schemas.RegisterSchema = Body(...), db: Session = Depends(get_db)):
    user = controller.register_user(db, payload)
    return Envelope(
        status=status.HTTP_201_CREATED,
        message="User registered successfully",
        data=UserData.model_validate(user),
    )


# ----------------------
# Login / Logout
# ----------------------
@router.post("/login", response_model=Envelope[schemas.TokenData])
def login(
    response: Response,
    credentials: schemas.LoginSchema = Body(...),
    db: Session = Depends(get_db),
):
    logging.debug("Login endpoint called for email: {}", credentials.email)
    user = controller.authenticate_user(db, credentials.email, credentials.password)

    access_token = issue_token(user)
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=access_token,
        max_age=ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        samesite="lax",
        secure=ENVIRONMENT == "production",
    )
    logging.info("User {} logged in", user.id)
    return Envelope(
        message="Login successful",
        data=schemas.TokenData(access_token=access_token, user=UserData.model_validate(user)),
    )


@router.post("/logout", response_model=Envelope)
def logout(response: Response):
    response.delete_cookie(SESSION_COOKIE_NAME)
    return Envelope(message="Logged out")


# ----------------------
# Profile sync
# ----------------------
@router.get("/sync-profile", response_model=Envelope[SafeProfile])
def get_synced_profile(current_user: User = Depends(get_current_user)):
    return Envelope(message="Profile fetched", data=SafeProfile.model_validate(current_user))


@router.post("/sync-profile", response_model=Envelope[SafeProfile])
def sync_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Make sure the signed-in user has a username and a verified email stamp.
    """
    user = sync_user_profile(db, current_user)
    return Envelope(message="Profile synchronized", data=SafeProfile.model_validate(user))
