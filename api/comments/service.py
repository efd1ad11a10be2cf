"""
Comment business logic.

Write path order: validate -> captcha (production only) -> insert.
Nothing touches the store or the verifier until validation has passed.
"""

from __future__ import annotations

import logging

from core.captcha import CaptchaVerifier, require_captcha
from core.errors import NotFoundError, storage_guard
from core.validation import MAX_BODY_CHARS, MAX_NAME_CHARS, check_max_length, require_fields

from . import schemas
from .repository import CommentPage, CommentRepository

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 6

logger = logging.getLogger(__name__)


def validate_new_comment(payload: schemas.CreateCommentRequest) -> dict[str, str]:
    fields = require_fields({"nombre": payload.nombre, "comentario": payload.comentario})
    check_max_length(
        fields["nombre"],
        MAX_NAME_CHARS,
        f"El nombre no puede exceder los {MAX_NAME_CHARS} caracteres",
    )
    check_max_length(
        fields["comentario"],
        MAX_BODY_CHARS,
        f"El comentario no puede exceder los {MAX_BODY_CHARS} caracteres",
    )
    return fields


async def list_comments(repository: CommentRepository, *, page: int, limit: int) -> CommentPage:
    with storage_guard("Error al obtener los comentarios de la base de datos"):
        return await repository.list_page(page, limit)


async def get_comment(repository: CommentRepository, comment_id: int) -> dict:
    with storage_guard("Error al obtener el comentario"):
        row = await repository.get_by_id(comment_id)
    if row is None:
        raise NotFoundError("Comentario no encontrado")
    return row


async def create_comment(
    payload: schemas.CreateCommentRequest,
    *,
    repository: CommentRepository,
    verifier: CaptchaVerifier,
    production: bool,
) -> dict:
    fields = validate_new_comment(payload)
    await require_captcha(verifier, payload.captcha_token, production=production, context="comentario")

    with storage_guard("Error al crear el comentario en la base de datos"):
        row = await repository.create(nombre=fields["nombre"], comentario=fields["comentario"])
    logger.info("comment_created id=%s", row.get("id"))
    return row


async def delete_comment(repository: CommentRepository, comment_id: int) -> dict:
    with storage_guard("Error al eliminar el comentario"):
        row = await repository.delete_by_id(comment_id)
    if row is None:
        raise NotFoundError("Comentario no encontrado")
    logger.info("comment_deleted id=%s", comment_id)
    return row


async def comment_stats(repository: CommentRepository) -> dict:
    with storage_guard("Error al obtener las estadísticas"):
        return await repository.get_stats()
