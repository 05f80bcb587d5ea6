"""User models and schemas for authentication."""
from datetime import UTC, datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, field_serializer, field_validator
from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.db import Base


class User(Base):
    """User account model."""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    articles = relationship(
        "Article", back_populates="author", cascade="all, delete-orphan", passive_deletes=True
    )


def serialize_utc(dt: datetime) -> str:
    """
    Serialize datetime to ISO8601 with 'Z' timezone indicator.

    Args:
        dt: Datetime to serialize (assumed UTC if naive)

    Returns:
        ISO8601 string with 'Z' suffix (e.g., '2025-11-01T15:29:31Z')
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    else:
        dt = dt.astimezone(UTC)
    return dt.isoformat().replace("+00:00", "Z")


# Pydantic schemas
class AuthorResponse(BaseModel):
    """Public author details embedded in article responses."""

    id: int
    username: str
    email: str

    class Config:
        from_attributes = True


class UserResponse(AuthorResponse):
    """Schema for user API responses."""

    is_active: bool
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def serialize_datetime(self, dt: datetime, _info) -> str:
        return serialize_utc(dt)


class SignupRequest(BaseModel):
    """Request schema for account creation."""

    username: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_as_missing(cls, v):
        # Blank counts as missing
        if isinstance(v, str) and not v.strip():
            return None
        return v


class LoginRequest(BaseModel):
    """Request schema for email/password login."""

    email: Optional[str] = None
    password: Optional[str] = None


class TokenResponse(BaseModel):
    """Response schema for authentication tokens."""

    message: str
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse


class RefreshTokenRequest(BaseModel):
    """Request schema for token refresh."""

    refresh_token: Optional[str] = None


class AccessTokenResponse(BaseModel):
    """Response schema for token refresh."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
