"""
Authentication module data models.

These models define the data structures used by the auth module
and exposed to other modules through the interface.
"""

from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from shared.models import Identity, Role


class TokenType(str, Enum):
    """Kind of signed token."""

    ACCESS = "access"
    REFRESH = "refresh"


class TokenClaims(BaseModel):
    """
    Decoded JWT payload.

    The role is a snapshot taken when the token was issued.
    """

    sub: str = Field(..., description="Subject (identity ID)")
    role: Optional[Role] = Field(None, description="Role at issuance (access tokens only)")
    type: TokenType = Field(..., description="Token type")
    exp: int = Field(..., description="Expiration timestamp")
    iat: int = Field(..., description="Issued at timestamp")

    model_config = ConfigDict(frozen=True, extra="ignore")

    @property
    def identity_id(self) -> str:
        return self.sub


class RegisterRequest(BaseModel):
    """Self-service account registration."""

    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)


class LoginRequest(BaseModel):
    """Email/password login."""

    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    password: str = Field(..., min_length=1)
    remember_me: bool = Field(default=False, alias="rememberMe")


class RefreshRequest(BaseModel):
    """Exchange a refresh token for a new access token."""

    model_config = ConfigDict(populate_by_name=True)

    refresh_token: str = Field(..., alias="refreshToken", min_length=1)


class UpdateProfileRequest(BaseModel):
    """Fields an identity may change on its own profile."""

    username: Optional[str] = Field(None, min_length=3, max_length=50)
    email: Optional[EmailStr] = None


class ChangePasswordRequest(BaseModel):
    """Password change for the authenticated identity."""

    model_config = ConfigDict(populate_by_name=True)

    current_password: str = Field(..., alias="currentPassword", min_length=1)
    new_password: str = Field(..., alias="newPassword", min_length=6, max_length=128)


class ClientInfo(BaseModel):
    """Device metadata captured at login."""

    ip: Optional[str] = None
    user_agent: Optional[str] = None


class LoginResult(BaseModel):
    """Tokens and identity returned by a successful login."""

    model_config = ConfigDict(populate_by_name=True)

    token: str
    refresh_token: str = Field(..., alias="refreshToken")
    user: Identity


class RefreshResult(BaseModel):
    """New access token returned by the refresh endpoint."""

    token: str
