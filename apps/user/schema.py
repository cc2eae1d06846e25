from pydantic import BaseModel
from typing import Optional


class Identity(BaseModel):
    """Caller identity yielded by a validated bearer token."""
    id: str
    email: Optional[str] = None


class SignupRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RefreshRequest(BaseModel):
    refresh_token: Optional[str] = None


class SessionResponse(BaseModel):
    success: bool = True
    user: dict
    access_token: str
    refresh_token: Optional[str] = None
