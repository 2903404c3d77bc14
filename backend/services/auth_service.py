"""
Auth Service - User registration, login and token issuance
"""
import logging
from typing import Optional
from uuid import UUID

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models.users import User
from security import create_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


def issue_token(user: User) -> str:
    """Sign a token bound to the user's id and email."""
    return create_access_token(data={"sub": str(user.id), "email": user.email})


def to_public_user(user: User) -> dict:
    return {
        "id": user.id,
        "email": user.email,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


def register(db: Session, email: str, password: str) -> dict:
    """
    Register a new user.
    
    Args:
        db: Database session
        email: User's email (stored as given)
        password: Plain text password, hashed with bcrypt before storage
        
    Returns:
        Dict with the created user and an access token
        
    Raises:
        HTTPException 409: Email already registered
        HTTPException 500: Unexpected persistence failure
    """
    # Check if email already exists
    existing_user = db.query(User).filter(User.email == email).first()
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists"
        )
    
    try:
        user = User(email=email, password_hash=hash_password(password))
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError:
        # Concurrent registration won the unique constraint
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="User with this email already exists"
        )
    except Exception:
        db.rollback()
        logger.exception("Registration failed for %s", email)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to register user"
        )
    
    logger.info("Registered user %s", user.id)
    return {"user": user, "token": issue_token(user)}


def login(db: Session, email: str, password: str) -> dict:
    """
    Authenticate user and return a fresh access token.
    
    Unknown email and wrong password produce the same error.
    
    Raises:
        HTTPException 401: Invalid credentials
    """
    user = db.query(User).filter(User.email == email).first()
    
    if not user or not verify_password(password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=INVALID_CREDENTIALS,
            headers={"WWW-Authenticate": "Bearer"},
        )
    
    return {"user": user, "token": issue_token(user)}


def validate_user(db: Session, payload: dict) -> Optional[dict]:
    """
    Resolve the token subject to an existing user.
    
    Returns None when the subject is malformed or the user no longer exists;
    the caller must then reject the request.
    """
    try:
        user_id = UUID(str(payload.get("sub")))
    except ValueError:
        return None
    
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        return None
    
    return to_public_user(user)


def refresh_token(db: Session, user_id: UUID) -> str:
    """
    Issue a new token with the same claims.
    
    Raises:
        HTTPException 401: User no longer exists
    """
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return issue_token(user)


def find_user_by_id(db: Session, user_id: UUID) -> Optional[dict]:
    user = db.query(User).filter(User.id == user_id).first()
    return to_public_user(user) if user else None


def find_user_by_email(db: Session, email: str) -> Optional[dict]:
    user = db.query(User).filter(User.email == email).first()
    return to_public_user(user) if user else None
