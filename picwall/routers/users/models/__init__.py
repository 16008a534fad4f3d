# picwall/routers/users/models/__init__.py
from .users import User, Account
from .follow import Follow

__all__ = ["User", "Account", "Follow"]
