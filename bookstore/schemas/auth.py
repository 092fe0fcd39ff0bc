"""
Pydantic schemas for /auth endpoints.

Request fields are Optional so that a missing email or password reaches
AuthService and is reported with the service's own message rather than a
generic schema error. The password hash never appears in any response model.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    username: Optional[str] = Field(default=None, max_length=100)


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class RegisteredUser(BaseModel):
    id: uuid.UUID
    email: str
    created_at: datetime

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserProfile(BaseModel):
    id: uuid.UUID
    username: Optional[str] = Field(default=None, max_length=100)
    email: str

    model_config = {"from_attributes": True}
