from .auth import RegisterSchema, LoginSchema, TokenData

__all__ = ["RegisterSchema", "LoginSchema", "TokenData"]
