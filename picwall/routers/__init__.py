# picwall/routers/__init__.py
from .auth.main import router as auth_router
from .users.main import router as user_router
from .users.main import public_router as users_router
from .posts.main import router as posts_router
from .feed.main import router as feed_router
from .images.main import router as images_router
from .logs.main import router as logs_router

__all__ = [
    "auth_router",
    "user_router",
    "users_router",
    "posts_router",
    "feed_router",
    "images_router",
    "logs_router",
]
