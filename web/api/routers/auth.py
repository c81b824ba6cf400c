"""
Authentication Router

Endpoints for user registration, login, and profile.
"""

import sqlite3
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr

from src.database import Database
from web.api.deps import Catalog, get_current_user, get_db, require_store
from web.api.auth import (
    Token,
    create_access_token,
    hash_password,
    verify_password,
)

router = APIRouter()


class UserRegister(BaseModel):
    """User registration request."""
    username: str
    email: EmailStr
    password: str


class UserLogin(BaseModel):
    """User login request."""
    username: str
    password: str


class UserResponse(BaseModel):
    """User response (no password)."""
    id: int
    username: str
    email: str
    is_active: bool
    is_admin: bool
    created_at: str
    last_login: Optional[str] = None


def user_to_response(user: dict) -> UserResponse:
    return UserResponse(
        id=user["id"],
        username=user["username"],
        email=user["email"],
        is_active=bool(user["is_active"]),
        is_admin=bool(user["is_admin"]),
        created_at=user["created_at"],
        last_login=user.get("last_login"),
    )


@router.post("/register", response_model=UserResponse)
def register(user_data: UserRegister, db: Database = Depends(require_store)):
    """
    Register a new user.
    First user automatically becomes admin.
    """
    if db.get_user_by_username(user_data.username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Username already registered",
        )

    if db.get_user_by_email(user_data.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    try:
        user_id = db.create_user(
            username=user_data.username,
            email=user_data.email,
            password_hash=hash_password(user_data.password),
            is_admin=db.get_user_count() == 0,
        )
    except sqlite3.IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User already registered",
        )

    return user_to_response(db.get_user_by_id(user_id))


@router.post("/login", response_model=Token)
def login(credentials: UserLogin, db: Database = Depends(require_store)):
    """
    Authenticate user and return JWT token.
    """
    user = db.get_user_by_username(credentials.username)
    if not user or not verify_password(credentials.password, user["password_hash"]):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.get("is_active"):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    db.update_last_login(user["id"])
    return Token(access_token=create_access_token(user["id"], user["username"]))


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: dict = Depends(get_current_user)):
    """
    Get the current authenticated user's profile.
    """
    return user_to_response(current_user)


@router.post("/logout")
async def logout(current_user: dict = Depends(get_current_user)):
    """
    Logout endpoint. Tokens are stateless, so the client discards its token.
    """
    return {"message": "Successfully logged out"}


@router.get("/setup-status")
def setup_status(db: Catalog = Depends(get_db)):
    """
    Whether an admin account still needs to be registered.
    """
    user_count = db.get_user_count() if db.enabled else 0
    return {"needs_setup": db.enabled and user_count == 0, "user_count": user_count}
