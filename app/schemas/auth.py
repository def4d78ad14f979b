"""Authentication schemas."""

from pydantic import BaseModel, EmailStr


class UserLogin(BaseModel):
    """Schema for user login."""

    email: EmailStr
    password: str


class Token(BaseModel):
    """Schema for JWT token response."""

    access_token: str
    token_type: str = "bearer"


class SessionResponse(BaseModel):
    """Current identity and UI capabilities."""

    id: str
    email: str
    full_name: str | None
    is_admin: bool
