from datetime import datetime
from typing import Optional
from pydantic import Field, field_validator

from picwall.utils.schemas import CamelModel


# =============================
# Read models
# =============================
class UserSummary(CamelModel):
    """The slice of a user embedded in posts and comments."""
    id: int
    name: str
    username: Optional[str] = None
    image: Optional[str] = None
    image_key: Optional[str] = None


class UserData(CamelModel):
    id: int
    name: str
    email: str
    image: Optional[str] = None
    image_key: Optional[str] = None
    username: Optional[str] = None
    bio: str = ""
    email_verified: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class SafeProfile(CamelModel):
    id: int
    name: Optional[str] = None
    email: Optional[str] = None
    image: Optional[str] = None
    username: Optional[str] = None
    bio: Optional[str] = None


class PublicProfile(UserSummary):
    bio: str = ""
    created_at: datetime
    followers: int = 0
    following: int = 0
    posts: int = 0
    is_following: Optional[bool] = None


# =============================
# Profile updates
# =============================
class UpdateProfileRequest(CamelModel):
    name: Optional[str] = Field(None, max_length=255)
    username: Optional[str] = Field(None, max_length=50)
    bio: Optional[str] = None

    @field_validator("name", "username")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value


class FileTypeRequest(CamelModel):
    file_type: Optional[str] = None


class UploadUrlData(CamelModel):
    upload_url: str = Field(alias="uploadURL")
    key: str


class ProfileImageRequest(CamelModel):
    image_key: Optional[str] = None


# =============================
# Follow graph
# =============================
class FollowRequest(CamelModel):
    user_id: Optional[int] = None


class FollowData(CamelModel):
    id: int
    follower_id: int
    following_id: int
    created_at: datetime
