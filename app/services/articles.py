"""Article create/update/delete operations.

Content is optionally passed through the text processor's ``improve`` step,
and the short summary is always derived from the content that gets stored.
"""

from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from app.core.logging import get_logger
from app.models.article import Article, ArticleCategory
from app.models.user import User
from app.repositories import article_repository
from app.services.text_processing import TextProcessor

logger = get_logger(__name__)


class ArticleNotFoundError(LookupError):
    """Raised when an article id does not exist."""


class ArticlePermissionError(PermissionError):
    """Raised when a user modifies an article they did not write."""


@dataclass(frozen=True)
class ArticleChanges:
    """Validated article fields supplied by a caller. ``None`` means unchanged."""

    title: str | None = None
    category: ArticleCategory | None = None
    content: str | None = None
    tags: str | None = None
    use_ai: bool = False


def _article_extra(operation: str, **context_data: Any) -> dict[str, Any]:
    return {
        "component": "articles",
        "operation": operation,
        "item_id": str(context_data.get("article_id"))
        if context_data.get("article_id") is not None
        else None,
        "context_data": {key: value for key, value in context_data.items() if value is not None},
    }


def prepare_content(content: str, use_ai: bool, processor: TextProcessor) -> tuple[str, str]:
    """Return ``(final_content, short_summary)`` for content about to be stored."""
    final_content = processor.improve(content) if use_ai else content
    return final_content, processor.summarize(final_content)


def get_article_or_raise(db: Session, article_id: int) -> Article:
    article = article_repository.get_article(db, article_id)
    if article is None:
        raise ArticleNotFoundError(f"Article not found for article_id={article_id}")
    return article


def _get_owned_article(db: Session, article_id: int, user: User, operation: str) -> Article:
    article = get_article_or_raise(db, article_id)
    if article.user_id != user.id:
        logger.warning(
            "Rejected %s on article %s by non-author %s",
            operation,
            article_id,
            user.id,
            extra=_article_extra(operation, article_id=article_id, user_id=user.id),
        )
        raise ArticlePermissionError(f"User {user.id} is not the author of article {article_id}")
    return article


def create_article(
    db: Session, user: User, changes: ArticleChanges, processor: TextProcessor
) -> Article:
    """Persist a new article written by ``user``."""
    final_content, short_summary = prepare_content(changes.content, changes.use_ai, processor)

    article = Article(
        title=changes.title,
        category=changes.category.value,
        content=final_content,
        tags=changes.tags,
        short_summary=short_summary,
        user_id=user.id,
    )
    db.add(article)
    db.commit()
    db.refresh(article)

    logger.info(
        "Created article %s",
        article.id,
        extra=_article_extra(
            "create_article", article_id=article.id, user_id=user.id, use_ai=changes.use_ai
        ),
    )
    return article


def update_article(
    db: Session,
    article_id: int,
    user: User,
    changes: ArticleChanges,
    processor: TextProcessor,
) -> Article:
    """Apply a partial update; only the author may update.

    Content and summary are recomputed only when new content is supplied.
    """
    article = _get_owned_article(db, article_id, user, "update_article")

    if changes.title is not None:
        article.title = changes.title
    if changes.category is not None:
        article.category = changes.category.value
    if changes.tags is not None:
        article.tags = changes.tags
    if changes.content:
        article.content, article.short_summary = prepare_content(
            changes.content, changes.use_ai, processor
        )

    db.commit()
    db.refresh(article)

    logger.info(
        "Updated article %s",
        article.id,
        extra=_article_extra(
            "update_article",
            article_id=article.id,
            user_id=user.id,
            content_changed=bool(changes.content),
        ),
    )
    return article


def delete_article(db: Session, article_id: int, user: User) -> None:
    """Delete an article; only the author may delete."""
    article = _get_owned_article(db, article_id, user, "delete_article")
    db.delete(article)
    db.commit()

    logger.info(
        "Deleted article %s",
        article_id,
        extra=_article_extra("delete_article", article_id=article_id, user_id=user.id),
    )
