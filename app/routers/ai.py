"""Standalone text-processing endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.core.deps import get_current_user, get_text_processor
from app.models.user import User
from app.services.text_processing import TextProcessor

router = APIRouter()


class ContentRequest(BaseModel):
    content: str | None = None


class ImproveResponse(BaseModel):
    improved: str


class SummaryResponse(BaseModel):
    summary: str


def _require_content(request: ContentRequest) -> str:
    if not request.content or not request.content.strip():
        raise HTTPException(status_code=400, detail="Content is required.")
    return request.content


@router.post("/improve", response_model=ImproveResponse, summary="Improve article content")
def improve_content(
    request: ContentRequest,
    _current_user: Annotated[User, Depends(get_current_user)],
    processor: Annotated[TextProcessor, Depends(get_text_processor)],
) -> ImproveResponse:
    return ImproveResponse(improved=processor.improve(_require_content(request)))


@router.post("/summary", response_model=SummaryResponse, summary="Generate a short summary")
def generate_summary(
    request: ContentRequest,
    _current_user: Annotated[User, Depends(get_current_user)],
    processor: Annotated[TextProcessor, Depends(get_text_processor)],
) -> SummaryResponse:
    return SummaryResponse(summary=processor.summarize(_require_content(request)))
