from datetime import datetime
from typing import List, Optional
from pydantic import Field, field_validator

from picwall.routers.users.schemas import UserSummary
from picwall.utils.schemas import CamelModel, Pagination


# =============================
# Read models
# =============================
class CommentData(CamelModel):
    id: int
    text: str
    created_at: datetime
    user: UserSummary


class PostData(CamelModel):
    id: int
    user: UserSummary
    caption: Optional[str] = None
    image_url: str
    image_key: str
    likes: List[int] = []
    comments: List[CommentData] = []
    created_at: datetime
    updated_at: datetime
    is_followed: Optional[bool] = None

    @field_validator("likes", mode="before")
    @classmethod
    def like_user_ids(cls, value):
        # ORM Like rows -> liker ids
        return [getattr(like, "user_id", like) for like in value or []]


class PostList(CamelModel):
    posts: List[PostData]
    pagination: Optional[Pagination] = None


class FeedData(CamelModel):
    posts: List[PostData]
    pagination: Pagination
    is_authenticated: bool


class LikeData(CamelModel):
    likes: List[int]
    liked: bool


class DeletedPost(CamelModel):
    id: int


# =============================
# Requests
# =============================
class CreatePostRequest(CamelModel):
    image_key: Optional[str] = None
    image_url: Optional[str] = None
    caption: Optional[str] = Field(None, max_length=2200)


class UpdatePostRequest(CamelModel):
    caption: Optional[str] = Field(None, max_length=2200)


class CommentRequest(CamelModel):
    text: Optional[str] = Field(None, max_length=2200)
