"""Article CRUD endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.db import get_db_session
from app.core.deps import get_current_user, get_text_processor
from app.core.timing import timed
from app.models.article import (
    ArticleCategory,
    ArticleCreateRequest,
    ArticleDetailResponse,
    ArticleListResponse,
    ArticleMutationResponse,
    ArticleResponse,
    ArticleUpdateRequest,
    MessageResponse,
)
from app.models.user import User
from app.repositories import article_repository
from app.services import articles as article_service
from app.services.text_processing import TextProcessor

router = APIRouter()

NOT_AUTHOR_DETAIL = "Forbidden. You are not the author of this article."


def _list_response(articles) -> ArticleListResponse:
    return ArticleListResponse(
        count=len(articles),
        articles=[ArticleResponse.model_validate(article) for article in articles],
    )


@router.get(
    "",
    response_model=ArticleListResponse,
    summary="List articles",
    description="List all articles, newest first, with optional category, tag and text filters.",
)
def list_articles(
    db: Annotated[Session, Depends(get_db_session)],
    category: ArticleCategory | None = Query(None, description="Exact category match"),
    tags: str | None = Query(None, description="Substring of the article's tags"),
    search: str | None = Query(None, description="Substring of the title or summary"),
) -> ArticleListResponse:
    with timed("list_articles"):
        articles = article_repository.list_articles(
            db,
            category=category.value if category else None,
            tags=tags,
            search=search,
        )
    return _list_response(articles)


# Must be declared before /{article_id} so "my" is not parsed as an id
@router.get("/my", response_model=ArticleListResponse, summary="List my articles")
def my_articles(
    db: Annotated[Session, Depends(get_db_session)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> ArticleListResponse:
    with timed("my_articles"):
        articles = article_repository.list_articles(db, user_id=current_user.id)
    return _list_response(articles)


@router.get("/{article_id}", response_model=ArticleDetailResponse, summary="Get an article")
def get_article(
    article_id: int, db: Annotated[Session, Depends(get_db_session)]
) -> ArticleDetailResponse:
    try:
        article = article_service.get_article_or_raise(db, article_id)
    except article_service.ArticleNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Article not found.") from exc
    return ArticleDetailResponse(article=ArticleResponse.model_validate(article))


@router.post(
    "",
    response_model=ArticleMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an article",
)
def create_article(
    request: ArticleCreateRequest,
    db: Annotated[Session, Depends(get_db_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    processor: Annotated[TextProcessor, Depends(get_text_processor)],
) -> ArticleMutationResponse:
    """Create an article; the summary is generated from the stored content."""
    if not request.title or not request.category or not request.content:
        raise HTTPException(
            status_code=400, detail="Title, category, and content are required."
        )

    article = article_service.create_article(
        db,
        current_user,
        article_service.ArticleChanges(
            title=request.title,
            category=request.category,
            content=request.content,
            tags=request.tags,
            use_ai=request.use_ai,
        ),
        processor,
    )
    return ArticleMutationResponse(
        message="Article created successfully.",
        article=ArticleResponse.model_validate(article),
    )


@router.put("/{article_id}", response_model=ArticleMutationResponse, summary="Update an article")
def update_article(
    article_id: int,
    request: ArticleUpdateRequest,
    db: Annotated[Session, Depends(get_db_session)],
    current_user: Annotated[User, Depends(get_current_user)],
    processor: Annotated[TextProcessor, Depends(get_text_processor)],
) -> ArticleMutationResponse:
    """Update an article. Only the original author can update."""
    try:
        article = article_service.update_article(
            db,
            article_id,
            current_user,
            article_service.ArticleChanges(
                title=request.title,
                category=request.category,
                content=request.content,
                tags=request.tags,
                use_ai=request.use_ai,
            ),
            processor,
        )
    except article_service.ArticleNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Article not found.") from exc
    except article_service.ArticlePermissionError as exc:
        raise HTTPException(status_code=403, detail=NOT_AUTHOR_DETAIL) from exc

    return ArticleMutationResponse(
        message="Article updated successfully.",
        article=ArticleResponse.model_validate(article),
    )


@router.delete("/{article_id}", response_model=MessageResponse, summary="Delete an article")
def delete_article(
    article_id: int,
    db: Annotated[Session, Depends(get_db_session)],
    current_user: Annotated[User, Depends(get_current_user)],
) -> MessageResponse:
    """Delete an article. Only the original author can delete."""
    try:
        article_service.delete_article(db, article_id, current_user)
    except article_service.ArticleNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Article not found.") from exc
    except article_service.ArticlePermissionError as exc:
        raise HTTPException(status_code=403, detail=NOT_AUTHOR_DETAIL) from exc

    return MessageResponse(message="Article deleted successfully.")
