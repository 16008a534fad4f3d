from .posts import (
    CommentData,
    PostData,
    PostList,
    FeedData,
    LikeData,
    DeletedPost,
    CreatePostRequest,
    UpdatePostRequest,
    CommentRequest,
)

__all__ = [
    "CommentData",
    "PostData",
    "PostList",
    "FeedData",
    "LikeData",
    "DeletedPost",
    "CreatePostRequest",
    "UpdatePostRequest",
    "CommentRequest",
]
