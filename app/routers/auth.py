"""Authentication endpoints."""

from typing import Annotated

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.db import get_db_session
from app.core.deps import get_current_user
from app.core.logging import get_logger
from app.core.security import create_access_token, create_refresh_token, verify_token
from app.models.user import (
    AccessTokenResponse,
    LoginRequest,
    RefreshTokenRequest,
    SignupRequest,
    TokenResponse,
    User,
    UserResponse,
)
from app.services.users import (
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
    authenticate_user,
    register_user,
)

logger = get_logger(__name__)

router = APIRouter()


def _token_response(user: User, message: str) -> TokenResponse:
    return TokenResponse(
        message=message,
        access_token=create_access_token(user.id),
        refresh_token=create_refresh_token(user.id),
        user=UserResponse.model_validate(user),
    )


@router.post("/signup", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def signup(
    request: SignupRequest, db: Annotated[Session, Depends(get_db_session)]
) -> TokenResponse:
    """
    Register a new account and log it in immediately.

    Raises:
        HTTPException: 400 if a field is missing, 409 if the email is taken
    """
    username = (request.username or "").strip()
    if not username or not request.email or not request.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="All fields are required."
        )

    try:
        user = register_user(db, username, str(request.email), request.password)
    except EmailAlreadyRegisteredError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail="Email already registered."
        ) from exc

    return _token_response(user, "User registered successfully.")


@router.post("/login", response_model=TokenResponse)
def login(request: LoginRequest, db: Annotated[Session, Depends(get_db_session)]) -> TokenResponse:
    """
    Exchange email and password for access and refresh tokens.

    Raises:
        HTTPException: 400 if a field is missing, 401 on bad credentials
    """
    if not request.email or not request.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email and password are required.",
        )

    try:
        user = authenticate_user(db, request.email, request.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials."
        ) from exc

    logger.info(f"Login successful for user {user.id}")
    return _token_response(user, "Login successful.")


@router.post("/refresh", response_model=AccessTokenResponse)
def refresh_token(
    request: RefreshTokenRequest, db: Annotated[Session, Depends(get_db_session)]
) -> AccessTokenResponse:
    """
    Refresh access token using refresh token.

    A new refresh token is issued alongside the access token; the client
    should discard the old one.

    Raises:
        HTTPException: 401 if refresh token is invalid
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid refresh token"
    )

    if not request.refresh_token:
        raise credentials_exception

    try:
        payload = verify_token(request.refresh_token)
        user_id: str = payload.get("sub")
        token_type: str = payload.get("type")

        if user_id is None or token_type != "refresh":
            raise credentials_exception

        user_pk = int(user_id)
    except (jwt.InvalidTokenError, ValueError):
        raise credentials_exception from None

    user = db.query(User).filter(User.id == user_pk).first()

    if user is None or not user.is_active:
        raise credentials_exception

    logger.info(f"Token refresh successful for user {user.id}")

    return AccessTokenResponse(
        access_token=create_access_token(user.id),
        refresh_token=create_refresh_token(user.id),
    )


@router.get("/me", response_model=UserResponse)
def get_current_user_info(current_user: Annotated[User, Depends(get_current_user)]) -> UserResponse:
    """Get current authenticated user information."""
    return UserResponse.model_validate(current_user)
