from typing import List

from fastapi import APIRouter, Body, Depends, status
from loguru import logger as logging
from sqlalchemy.orm import Session

from picwall.database import get_db
from picwall.routers.users.controller import get_current_user
from picwall.routers.users.models import User
from picwall.routers.users.schemas import FileTypeRequest, UploadUrlData
from picwall.utils.errors import AppError, ErrorSeverity, ErrorSource
from picwall.utils.schemas import Envelope
from picwall.utils.storage import generate_upload_url
from . import controller, schemas

# Defining the router
router = APIRouter(
    prefix="/api/posts",
    tags=["Posts"],
    responses={404: {"description": "Not found"}},
)


def _missing(field: str) -> AppError:
    return AppError(
        f"{field} is required",
        source=ErrorSource.VALIDATION,
        severity=ErrorSeverity.WARNING,
        code="VALIDATION_MISSING_FIELDS",
        status_code=status.HTTP_400_BAD_REQUEST,
    )


# ----------------------
# Upload URL
# ----------------------
@router.post("/upload-url", response_model=Envelope[UploadUrlData])
def create_upload_url(
    payload: FileTypeRequest = Body(...),
    current_user: User = Depends(get_current_user),
):
    if not payload.file_type:
        raise _missing("fileType")
    upload = generate_upload_url(payload.file_type, folder="uploads")
    logging.info("User {} requested upload URL for {}", current_user.id, upload["key"])
    return Envelope(message="Upload URL generated", data=UploadUrlData(**upload))


# ----------------------
# Posts
# ----------------------
@router.post("", response_model=Envelope[schemas.PostData], status_code=status.HTTP_201_CREATED)
def create_post(
    payload: schemas.CreatePostRequest = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not payload.image_key:
        raise _missing("imageKey")

    post = controller.create_post(
        db,
        current_user,
        image_key=payload.image_key,
        caption=payload.caption,
        image_url=payload.image_url,
    )
    return Envelope(
        status=status.HTTP_201_CREATED,
        message="Post created successfully",
        data=schemas.PostData.model_validate(post),
    )


@router.get("", response_model=Envelope[List[schemas.PostData]])
def list_posts(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    posts = controller.list_posts(db)
    return Envelope(
        message="Posts fetched successfully",
        data=[schemas.PostData.model_validate(post) for post in posts],
    )


@router.get("/{post_id}", response_model=Envelope[schemas.PostData])
def get_post(post_id: int, db: Session = Depends(get_db)):
    post = controller.get_post_or_404(db, post_id)
    return Envelope(message="Post fetched successfully", data=schemas.PostData.model_validate(post))


@router.put("/{post_id}", response_model=Envelope[schemas.PostData])
def update_post(
    post_id: int,
    payload: schemas.UpdatePostRequest = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    post = controller.get_post_or_404(db, post_id)
    controller.ensure_owner(post, current_user, "edit")

    # "" is a valid caption, an absent one is not
    if "caption" not in payload.model_fields_set or payload.caption is None:
        raise _missing("caption")

    post = controller.update_caption(db, post, payload.caption)
    return Envelope(message="Post updated successfully", data=schemas.PostData.model_validate(post))


@router.delete("/{post_id}", response_model=Envelope[schemas.DeletedPost])
def delete_post(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    post = controller.get_post_or_404(db, post_id)
    controller.ensure_owner(post, current_user, "delete")
    controller.delete_post(db, post)
    return Envelope(message="Post deleted successfully", data=schemas.DeletedPost(id=post_id))


# ----------------------
# Likes & comments
# ----------------------
@router.post("/{post_id}/like", response_model=Envelope[schemas.LikeData])
def toggle_like(
    post_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    post = controller.get_post_or_404(db, post_id)
    likes, liked = controller.toggle_like(db, post, current_user)
    return Envelope(
        message="Post liked" if liked else "Post unliked",
        data=schemas.LikeData(likes=likes, liked=liked),
    )


@router.post(
    "/{post_id}/comment",
    response_model=Envelope[schemas.CommentData],
    status_code=status.HTTP_201_CREATED,
)
def add_comment(
    post_id: int,
    payload: schemas.CommentRequest = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    post = controller.get_post_or_404(db, post_id)
    if not payload.text or not payload.text.strip():
        raise _missing("Comment text")

    comment = controller.add_comment(db, post, current_user, payload.text)
    return Envelope(
        status=status.HTTP_201_CREATED,
        message="Comment added successfully",
        data=schemas.CommentData.model_validate(comment),
    )
