"""
Authentication Routes - User registration, login and token endpoints
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_db
from schemas.auth_schemas import (
    RegisterRequest,
    LoginRequest,
    AuthResponse,
    ProfileResponse,
    TokenResponse,
    TokenValidationResponse,
    UserIdentity,
    UserProfileResponse,
    UserResponse
)
from schemas.common_schemas import ApiResponse
from security import get_current_user
from services import auth_service

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _auth_response(result: dict) -> AuthResponse:
    user = result["user"]
    return AuthResponse(
        user=UserResponse(
            id=user.id,
            email=user.email,
            created_at=user.created_at
        ),
        token=result["token"],
        token_type="bearer"
    )


@router.post("/register", response_model=ApiResponse[AuthResponse], status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, db: Session = Depends(get_db)):
    """
    Register a new user.
    
    Creates the user with a bcrypt hashed password.
    Returns access token and user data.
    
    Raises:
        HTTPException 409: Email already registered
        HTTPException 422: Invalid input data
    """
    result = auth_service.register(db, request.email, request.password)
    
    return ApiResponse(
        message="User registered successfully",
        data=_auth_response(result)
    )


@router.post("/login", response_model=ApiResponse[AuthResponse], status_code=status.HTTP_200_OK)
async def login(request: LoginRequest, db: Session = Depends(get_db)):
    """
    Authenticate user and return access token.
    
    Raises:
        HTTPException 401: Invalid credentials
    """
    result = auth_service.login(db, request.email, request.password)
    
    return ApiResponse(
        message="Login successful",
        data=_auth_response(result)
    )


@router.get("/profile", response_model=ApiResponse[ProfileResponse])
async def get_profile(current_user: dict = Depends(get_current_user)):
    """Return the authenticated user's profile."""
    return ApiResponse(
        message="Profile retrieved successfully",
        data=ProfileResponse(user=UserProfileResponse(**current_user))
    )


@router.post("/validate-token", response_model=ApiResponse[TokenValidationResponse], status_code=status.HTTP_200_OK)
async def validate_token(current_user: dict = Depends(get_current_user)):
    """Check that the bearer token is valid and its user still exists."""
    return ApiResponse(
        message="Token is valid",
        data=TokenValidationResponse(
            valid=True,
            user=UserIdentity(id=current_user["id"], email=current_user["email"])
        )
    )


@router.post("/refresh-token", response_model=ApiResponse[TokenResponse], status_code=status.HTTP_200_OK)
async def refresh_token(
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Issue a new access token for the authenticated user."""
    token = auth_service.refresh_token(db, current_user["id"])
    
    return ApiResponse(
        message="Token refreshed successfully",
        data=TokenResponse(token=token)
    )
