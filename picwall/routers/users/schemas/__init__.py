from .users import (
    UserSummary,
    UserData,
    SafeProfile,
    PublicProfile,
    UpdateProfileRequest,
    FileTypeRequest,
    UploadUrlData,
    ProfileImageRequest,
    FollowRequest,
    FollowData,
)

__all__ = [
    "UserSummary",
    "UserData",
    "SafeProfile",
    "PublicProfile",
    "UpdateProfileRequest",
    "FileTypeRequest",
    "UploadUrlData",
    "ProfileImageRequest",
    "FollowRequest",
    "FollowData",
]
