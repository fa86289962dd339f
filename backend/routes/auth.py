from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, EmailStr
from typing import Optional
from database.db import get_db
from models.user import User
from utils.security import (
    hash_password,
    verify_password,
    create_access_token,
    get_current_user
)
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["authentication"])

# ============ Request/Response Models ============

class LoginRequest(BaseModel):
    """Login request model"""
    email: EmailStr
    password: str

    class Config:
        json_schema_extra = {
            "example": {
                "email": "candidate@example.com",
                "password": "secure_password"
            }
        }

class SignupRequest(BaseModel):
    """User signup request model"""
    email: EmailStr
    password: str
    full_name: Optional[str] = None

    class Config:
        json_schema_extra = {
            "example": {
                "email": "candidate@example.com",
                "password": "secure_password",
                "full_name": "Jane Doe"
            }
        }

class TokenResponse(BaseModel):
    """Token response model"""
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str

class UserResponse(BaseModel):
    """User response model"""
    id: str
    email: str
    full_name: Optional[str] = None
    role: str
    is_active: bool

    class Config:
        from_attributes = True

def _token_for(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token(data={"sub": user.id}),
        token_type="bearer",
        user_id=user.id,
        email=user.email
    )

# ============ Signup Endpoint ============

@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    request: SignupRequest,
    db: Session = Depends(get_db)
):
    """
    User signup endpoint.

    Creates a new account and returns an access token immediately.

    Raises:
        HTTPException 400: Email already registered
        HTTPException 500: Signup failed
    """
    try:
        existing_user = db.query(User).filter(User.email == request.email).first()
        if existing_user:
            logger.warning(f"Signup failed: Email already exists - {request.email}")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Email already exists"
            )

        new_user = User(
            email=request.email,
            hashed_password=hash_password(request.password),
            full_name=request.full_name,
            role="user"
        )

        db.add(new_user)
        db.commit()
        db.refresh(new_user)

        logger.info(f"New user registered: {request.email}")

        return _token_for(new_user)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Signup error: {str(e)}")
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Signup failed"
        )

# ============ Login Endpoint ============

@router.post("/login", response_model=TokenResponse)
async def login(
    request: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    User login endpoint.

    Authenticates user with email and password.
    Returns JWT access token if credentials are valid.

    Raises:
        HTTPException 401: Invalid credentials
        HTTPException 403: User account is inactive
    """
    try:
        user = db.query(User).filter(User.email == request.email).first()

        if not user or not verify_password(request.password, user.hashed_password):
            logger.warning(f"Login failed: Invalid credentials - {request.email}")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password"
            )

        if not user.is_active:
            logger.warning(f"Login failed: User inactive - {request.email}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="User account is inactive"
            )

        logger.info(f"User logged in successfully: {request.email}")

        return _token_for(user)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Login error: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Login failed"
        )

# ============ Get Current User Profile ============

@router.get("/me", response_model=UserResponse)
async def get_me(
    current_user: User = Depends(get_current_user)
):
    """
    Get current authenticated user's profile.
    """
    return current_user
