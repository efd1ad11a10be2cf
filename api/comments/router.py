"""
Comment API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query, status

from core import dependencies
from core.captcha import CaptchaVerifier
from core.config import Settings
from core.validation import MAX_ROW_ID, parse_positive_int

from . import schemas, service
from .repository import CommentRepository

router = APIRouter(prefix="/api/comments")


@router.get("")
async def list_comments(
    page: str | None = Query(default=None),
    limit: str | None = Query(default=None),
    repository: CommentRepository = Depends(dependencies.get_comment_repository),
) -> dict:
    page_number = parse_positive_int(page, service.DEFAULT_PAGE)
    page_size = parse_positive_int(limit, service.DEFAULT_LIMIT)
    result = await service.list_comments(repository, page=page_number, limit=page_size)
    return {
        "success": True,
        "message": "Comentarios obtenidos correctamente",
        "comments": result.comments,
        "totalPages": result.total_pages,
        "currentPage": result.current_page,
        "totalComments": result.total_comments,
        "commentsPerPage": page_size,
    }


# Declared before "/{comment_id}" so "stats" is not parsed as an id.
@router.get("/stats")
async def comment_stats(
    repository: CommentRepository = Depends(dependencies.get_comment_repository),
) -> dict:
    stats = await service.comment_stats(repository)
    return {"success": True, "data": stats}


@router.get("/{comment_id}")
async def get_comment(
    comment_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    repository: CommentRepository = Depends(dependencies.get_comment_repository),
) -> dict:
    row = await service.get_comment(repository, comment_id)
    return {"success": True, "data": row}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_comment(
    request: schemas.CreateCommentRequest,
    repository: CommentRepository = Depends(dependencies.get_comment_repository),
    verifier: CaptchaVerifier = Depends(dependencies.get_captcha_verifier),
    settings: Settings = Depends(dependencies.get_settings),
) -> dict:
    row = await service.create_comment(
        request,
        repository=repository,
        verifier=verifier,
        production=settings.is_production,
    )
    return {
        "success": True,
        "message": "Comentario creado exitosamente",
        "data": row,
    }


@router.delete("/{comment_id}")
async def delete_comment(
    comment_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    repository: CommentRepository = Depends(dependencies.get_comment_repository),
) -> dict:
    row = await service.delete_comment(repository, comment_id)
    return {
        "success": True,
        "message": "Comentario eliminado exitosamente",
        "data": row,
    }
