from typing import List, Optional, Tuple
from urllib.parse import quote

from fastapi import status
from loguru import logger as logging
from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, joinedload, selectinload

from picwall.config import PUBLIC_API_URL
from picwall.routers.users.controller import following_ids
from picwall.routers.users.models import User
from picwall.utils.errors import AppError, ErrorSeverity, ErrorSource, handle_db_error, log_error
from picwall.utils.logger import track_performance
from picwall.utils.storage import delete_object
from .models import Comment, Like, Post


def _with_relations(query):
    return query.options(
        joinedload(Post.user),
        selectinload(Post.likes),
        selectinload(Post.comments).joinedload(Comment.user),
    )


def image_url_for_key(image_key: str) -> str:
    """Stable app URL that resolves to a fresh presigned link on each view."""
    return f"{PUBLIC_API_URL}/api/images/{quote(image_key, safe='')}"


def _commit(db: Session, operation: str):
    try:
        db.commit()
    except (SQLAlchemyError, ValueError) as e:
        db.rollback()
        raise handle_db_error(e, operation)


# ============================================
# Single posts
# ============================================
def get_post_or_404(db: Session, post_id: int) -> Post:
    post = _with_relations(db.query(Post)).filter(Post.id == post_id).first()
    if not post:
        raise AppError(
            "Post not found",
            source=ErrorSource.API,
            severity=ErrorSeverity.WARNING,
            code="POST_NOT_FOUND",
            status_code=status.HTTP_404_NOT_FOUND,
        )
    return post


def ensure_owner(post: Post, user: User, action: str):
    if post.user_id != user.id:
        raise AppError(
            f"You can only {action} your own posts",
            source=ErrorSource.AUTH,
            severity=ErrorSeverity.WARNING,
            code="POST_FORBIDDEN",
            status_code=status.HTTP_403_FORBIDDEN,
            user_id=user.id,
        )


def create_post(db: Session, user: User, image_key: str, caption: Optional[str] = None,
                image_url: Optional[str] = None) -> Post:
    try:
        post = Post(
            user_id=user.id,
            caption=caption,
            image_key=image_key,
            image_url=image_url or image_url_for_key(image_key),
        )
    except ValueError as e:
        raise handle_db_error(e, "create post")

    db.add(post)
    _commit(db, "create post")
    logging.info("User {} created post {}", user.id, post.id)
    return get_post_or_404(db, post.id)


def update_caption(db: Session, post: Post, caption: str) -> Post:
    try:
        post.caption = caption
    except ValueError as e:
        raise handle_db_error(e, "update post")
    _commit(db, "update post")
    db.refresh(post)
    return post


def delete_post(db: Session, post: Post) -> None:
    """Delete the post with its likes and comments, then its stored image."""
    post_id, image_key = post.id, post.image_key
    db.delete(post)
    _commit(db, "delete post")
    logging.info("Deleted post {}", post_id)

    if image_key:
        try:
            delete_object(image_key)
        except AppError as s3_error:
            # the post is already gone; a leftover object is only logged
            log_error(s3_error)


def toggle_like(db: Session, post: Post, user: User) -> Tuple[List[int], bool]:
    existing = next((like for like in post.likes if like.user_id == user.id), None)
    if existing:
        post.likes.remove(existing)
        liked = False
    else:
        post.likes.append(Like(user_id=user.id))
        liked = True

    try:
        db.commit()
    except IntegrityError:
        # a concurrent request already liked it
        db.rollback()
        liked = True
    except SQLAlchemyError as e:
        db.rollback()
        raise handle_db_error(e, "toggle like")

    db.refresh(post)
    return [like.user_id for like in post.likes], liked


def add_comment(db: Session, post: Post, user: User, text: str) -> Comment:
    try:
        comment = Comment(post_id=post.id, user_id=user.id, text=text)
    except ValueError as e:
        raise AppError(
            str(e),
            source=ErrorSource.VALIDATION,
            severity=ErrorSeverity.WARNING,
            code="VALIDATION_MISSING_FIELDS",
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    db.add(comment)
    _commit(db, "add comment")
    db.refresh(comment)
    return comment


# ============================================
# Lists
# ============================================
def list_posts(db: Session) -> List[Post]:
    return (
        _with_relations(db.query(Post))
        .order_by(Post.created_at.desc(), Post.id.desc())
        .all()
    )


def list_user_posts(db: Session, user_id: int, page: int, limit: int) -> Tuple[List[Post], int]:
    base = db.query(Post).filter(Post.user_id == user_id)
    total = base.count()
    posts = (
        _with_relations(base)
        .order_by(Post.created_at.desc(), Post.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return posts, total


def count_user_posts(db: Session, user_id: int) -> int:
    return db.query(func.count(Post.id)).filter(Post.user_id == user_id).scalar()


def feed_posts(db: Session, viewer: User, page: int, limit: int) -> Tuple[List[Post], set, int]:
    """
    Every post, authors the viewer follows first, newest first within each group.
    """
    with track_performance("feed query", ErrorSource.DATABASE):
        followed = set(following_ids(db, viewer.id))
        followed_first = case((Post.user_id.in_(followed), 1), else_=0)

        posts = (
            _with_relations(db.query(Post))
            .order_by(followed_first.desc(), Post.created_at.desc(), Post.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        total = db.query(func.count(Post.id)).scalar()

    return posts, followed, total
