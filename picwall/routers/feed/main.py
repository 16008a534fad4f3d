from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from picwall.database import get_db
from picwall.routers.posts import controller as posts_controller
from picwall.routers.posts.schemas import FeedData, PostData
from picwall.routers.users.controller import get_optional_user
from picwall.routers.users.models import User
from picwall.utils.schemas import Envelope, Pagination, build_pagination

# Defining the router
router = APIRouter(
    prefix="/api/feed",
    tags=["Feed"],
)


@router.get("", response_model=Envelope[FeedData])
def get_feed(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=50),
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    """
    Paginated feed: posts by followed authors first, then everyone else, newest first.
    Anonymous callers get an empty page.
    """
    if viewer is None:
        return Envelope(
            message="Sign in to see your feed",
            data=FeedData(
                posts=[],
                pagination=Pagination(total=0, page=page, limit=limit, pages=0),
                is_authenticated=False,
            ),
        )

    posts, followed, total = posts_controller.feed_posts(db, viewer, page, limit)
    items = []
    for post in posts:
        item = PostData.model_validate(post)
        item.is_followed = post.user_id in followed
        items.append(item)

    return Envelope(
        message="Feed fetched successfully",
        data=FeedData(posts=items, pagination=build_pagination(total, page, limit), is_authenticated=True),
    )
