"""Article model and API schemas."""
import enum
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_serializer
from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from app.core.db import Base
from app.models.user import AuthorResponse, serialize_utc


class ArticleCategory(str, enum.Enum):
    TECH = "Tech"
    AI = "AI"
    BACKEND = "Backend"
    FRONTEND = "Frontend"
    DEVOPS = "DevOps"


class Article(Base):
    __tablename__ = "articles"

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    category = Column(String(20), nullable=False, index=True)
    content = Column(Text, nullable=False)
    tags = Column(String(500), nullable=True)
    # Derived from content by the text processor, never set directly by clients
    short_summary = Column(Text, nullable=True)
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    author = relationship("User", back_populates="articles")

    __table_args__ = (Index("idx_article_user_created", "user_id", "created_at"),)

    def __repr__(self):
        return f"<Article(id={self.id}, title={self.title!r}, category={self.category})>"


# Pydantic schemas
class ArticleCreateRequest(BaseModel):
    """Request schema for creating an article."""

    title: Optional[str] = None
    category: Optional[ArticleCategory] = None
    content: Optional[str] = None
    tags: Optional[str] = None
    use_ai: bool = Field(False, description="Run the content through the text improver first")


class ArticleUpdateRequest(BaseModel):
    """Request schema for partially updating an article."""

    title: Optional[str] = None
    category: Optional[ArticleCategory] = None
    content: Optional[str] = None
    tags: Optional[str] = None
    use_ai: bool = False


class ArticleResponse(BaseModel):
    """Schema for article API responses."""

    id: int
    title: str
    category: ArticleCategory
    content: str
    tags: Optional[str] = None
    short_summary: Optional[str] = None
    user_id: int
    author: Optional[AuthorResponse] = None
    created_at: datetime
    updated_at: datetime

    @field_serializer("created_at", "updated_at")
    def serialize_datetime(self, dt: datetime, _info) -> str:
        return serialize_utc(dt)

    class Config:
        from_attributes = True


class ArticleListResponse(BaseModel):
    count: int
    articles: list[ArticleResponse]


class ArticleDetailResponse(BaseModel):
    article: ArticleResponse


class ArticleMutationResponse(BaseModel):
    message: str
    article: ArticleResponse


class MessageResponse(BaseModel):
    message: str
