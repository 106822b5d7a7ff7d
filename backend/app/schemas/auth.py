"""Admin auth request/response schemas."""

from pydantic import BaseModel


class AdminLoginRequest(BaseModel):
    username: str
    password: str


class AdminLoginResponse(BaseModel):
    success: bool = True
    token: str
    token_type: str = "bearer"
