from .posts import Post, Like, Comment, CAPTION_MAX_LENGTH

__all__ = ["Post", "Like", "Comment", "CAPTION_MAX_LENGTH"]
