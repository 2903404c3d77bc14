"""
Authentication Schemas - Request/Response validation for auth endpoints
"""
from datetime import datetime
from uuid import UUID

from email_validator import validate_email
from pydantic import Field, field_validator

from schemas.common_schemas import CamelModel

# bcrypt only considers the first 72 bytes of a secret
MAX_PASSWORD_BYTES = 72


class RegisterRequest(CamelModel):
    """Request schema for user registration"""
    email: str = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")
    
    @field_validator('email')
    @classmethod
    def validate_email_format(cls, v: str) -> str:
        """Check the address format but keep it exactly as submitted"""
        validate_email(v, check_deliverability=False)
        return v
    
    @field_validator('password')
    @classmethod
    def validate_password(cls, v: str) -> str:
        """Reject passwords bcrypt would silently truncate"""
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f'Password must be at most {MAX_PASSWORD_BYTES} bytes')
        return v


class LoginRequest(CamelModel):
    """Request schema for user login"""
    email: str = Field(..., description="User's email address")
    password: str = Field(..., min_length=1, description="User's password")

    @field_validator('email')
    @classmethod
    def validate_email_format(cls, v: str) -> str:
        """Check the address format but keep it exactly as submitted"""
        validate_email(v, check_deliverability=False)
        return v


class UserResponse(CamelModel):
    """Response schema for user data (without sensitive info)"""
    id: UUID = Field(..., description="User's unique identifier")
    email: str = Field(..., description="User's email address")
    created_at: datetime = Field(..., description="Registration date")


class UserProfileResponse(UserResponse):
    """Full public profile of the authenticated user"""
    updated_at: datetime = Field(..., description="Last update date")


class UserIdentity(CamelModel):
    id: UUID
    email: str


class AuthResponse(CamelModel):
    """Response schema for authentication (login/register)"""
    user: UserResponse = Field(..., description="User information")
    token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")


class ProfileResponse(CamelModel):
    user: UserProfileResponse


class TokenResponse(CamelModel):
    token: str = Field(..., description="Fresh JWT access token")
    token_type: str = Field(default="bearer", description="Token type")


class TokenValidationResponse(CamelModel):
    valid: bool = True
    user: UserIdentity
