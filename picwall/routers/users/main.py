from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status
from loguru import logger as logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from picwall.database import get_db
from picwall.routers.posts import controller as posts_controller
from picwall.routers.posts.controller import image_url_for_key
from picwall.routers.posts.schemas import PostData, PostList
from picwall.utils.errors import AppError, ErrorSeverity, ErrorSource, handle_db_error
from picwall.utils.schemas import Envelope, build_pagination
from picwall.utils.storage import generate_upload_url
from . import controller, models, schemas

# Defining the routers
router = APIRouter(
    prefix="/api/user",
    tags=["Current user"],
    responses={404: {"description": "Not found"}},
)

public_router = APIRouter(
    prefix="/api/users",
    tags=["Users"],
    responses={404: {"description": "Not found"}},
)


def _bad_request(message: str, code: str) -> AppError:
    return AppError(
        message,
        source=ErrorSource.VALIDATION,
        severity=ErrorSeverity.WARNING,
        code=code,
        status_code=status.HTTP_400_BAD_REQUEST,
    )


# ----------------------
# Profile
# ----------------------
@router.get("/profile", response_model=Envelope[schemas.UserData])
def get_profile(current_user: models.User = Depends(controller.get_current_user)):
    return Envelope(message="Profile fetched successfully", data=schemas.UserData.model_validate(current_user))


@router.put("/profile", response_model=Envelope[schemas.UserData])
def update_profile(
    payload: schemas.UpdateProfileRequest = Body(...),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(controller.get_current_user),
):
    # blank name or username means "leave as is"; bio may be cleared
    if payload.username and controller.username_taken(db, payload.username, exclude_user_id=current_user.id):
        raise _bad_request("Username is already taken", "USER_USERNAME_TAKEN")

    try:
        if payload.name:
            current_user.name = payload.name
        if payload.username:
            current_user.username = payload.username
        if payload.bio is not None:
            current_user.bio = payload.bio
        db.commit()
        db.refresh(current_user)
    except (SQLAlchemyError, ValueError) as e:
        db.rollback()
        raise handle_db_error(e, "update profile")

    logging.info("Profile updated for user {}", current_user.id)
    return Envelope(message="Profile updated successfully", data=schemas.UserData.model_validate(current_user))


@router.post("/profile/image", response_model=Envelope[schemas.UploadUrlData])
def create_profile_image_upload_url(
    payload: schemas.FileTypeRequest = Body(...),
    current_user: models.User = Depends(controller.get_current_user),
):
    if not payload.file_type:
        raise _bad_request("fileType is required", "VALIDATION_MISSING_FIELDS")
    upload = generate_upload_url(payload.file_type, folder="profile-images")
    return Envelope(message="Upload URL generated", data=schemas.UploadUrlData(**upload))


@router.put("/profile/image", response_model=Envelope[schemas.UserData])
def update_profile_image(
    payload: schemas.ProfileImageRequest = Body(...),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(controller.get_current_user),
):
    if not payload.image_key:
        raise _bad_request("imageKey is required", "VALIDATION_MISSING_KEY")

    current_user.image_key = payload.image_key
    current_user.image = image_url_for_key(payload.image_key)
    try:
        db.commit()
        db.refresh(current_user)
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_db_error(e, "update profile image")

    logging.info("Profile image updated for user {}", current_user.id)
    return Envelope(message="Profile image updated", data=schemas.UserData.model_validate(current_user))


# ----------------------
# Follow graph
# ----------------------
@router.post("/follow", response_model=Envelope[schemas.FollowData], status_code=status.HTTP_201_CREATED)
def follow(
    payload: schemas.FollowRequest = Body(...),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(controller.get_current_user),
):
    if payload.user_id is None:
        raise _bad_request("User ID is required", "VALIDATION_MISSING_FIELDS")

    edge = controller.follow_user(db, current_user, payload.user_id)
    return Envelope(
        status=status.HTTP_201_CREATED,
        message="Successfully followed user",
        data=schemas.FollowData.model_validate(edge),
    )


@router.delete("/follow", response_model=Envelope)
def unfollow(
    user_id: Optional[int] = Query(None, alias="userId"),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(controller.get_current_user),
):
    if user_id is None:
        raise _bad_request("User ID is required", "VALIDATION_MISSING_FIELDS")

    controller.unfollow_user(db, current_user, user_id)
    return Envelope(message="Successfully unfollowed user")


# ----------------------
# Own posts
# ----------------------
@router.get("/posts", response_model=Envelope[PostList])
def my_posts(
    page: int = Query(1, ge=1),
    limit: int = Query(12, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: models.User = Depends(controller.get_current_user),
):
    posts, total = posts_controller.list_user_posts(db, current_user.id, page, limit)
    return Envelope(
        message="Posts fetched successfully",
        data=PostList(
            posts=[PostData.model_validate(post) for post in posts],
            pagination=build_pagination(total, page, limit),
        ),
    )


# ----------------------
# Public profiles
# ----------------------
@public_router.get("/{user_id}", response_model=Envelope[schemas.PublicProfile])
def get_public_profile(
    user_id: int,
    db: Session = Depends(get_db),
    viewer: Optional[models.User] = Depends(controller.get_optional_user),
):
    user = controller.get_user_or_404(db, user_id)
    profile = schemas.PublicProfile.model_validate(user)
    counts = controller.follow_counts(db, user.id)
    profile.followers = counts["followers"]
    profile.following = counts["following"]
    profile.posts = posts_controller.count_user_posts(db, user.id)
    if viewer is not None:
        profile.is_following = controller.is_following(db, viewer.id, user.id)
    return Envelope(message="User fetched successfully", data=profile)
