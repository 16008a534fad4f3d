from typing import Optional
from pydantic import Field

from picwall.routers.users.schemas import UserData
from picwall.utils.schemas import CamelModel


class RegisterSchema(CamelModel):
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    username: Optional[str] = Field(None, max_length=50)


class LoginSchema(CamelModel):
    email: Optional[str] = None
    password: Optional[str] = None


class TokenData(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserData
