"""Aggregate import of all ORM models so they register on ``Base.metadata``."""

from app.core.db import Base
from app.models.article import Article, ArticleCategory
from app.models.user import User

__all__ = ["Article", "ArticleCategory", "Base", "User"]
