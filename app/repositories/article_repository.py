"""Query helpers for article listing and search."""

from sqlalchemy import or_, select
from sqlalchemy.orm import Session, joinedload

from app.models.article import Article


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_article_query(
    category: str | None = None,
    tags: str | None = None,
    search: str | None = None,
    user_id: int | None = None,
):
    """Build a newest-first select over articles with optional filters.

    ``tags`` matches as a substring of the stored tag string, ``search`` as a
    substring of either the title or the short summary.
    """
    stmt = select(Article).options(joinedload(Article.author))

    if user_id is not None:
        stmt = stmt.where(Article.user_id == user_id)

    if category:
        stmt = stmt.where(Article.category == category)

    if tags:
        stmt = stmt.where(Article.tags.like(f"%{_escape_like(tags)}%", escape="\\"))

    if search:
        pattern = f"%{_escape_like(search)}%"
        stmt = stmt.where(
            or_(
                Article.title.like(pattern, escape="\\"),
                Article.short_summary.like(pattern, escape="\\"),
            )
        )

    return stmt.order_by(Article.created_at.desc(), Article.id.desc())


def list_articles(db: Session, **filters) -> list[Article]:
    return list(db.execute(build_article_query(**filters)).scalars().unique().all())


def get_article(db: Session, article_id: int) -> Article | None:
    stmt = select(Article).options(joinedload(Article.author)).where(Article.id == article_id)
    return db.execute(stmt).scalar_one_or_none()
