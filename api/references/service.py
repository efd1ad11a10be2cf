"""
Reference business logic.
"""

from __future__ import annotations

import logging

from core.captcha import CaptchaVerifier, require_captcha
from core.errors import NotFoundError, storage_guard
from core.validation import MAX_BODY_CHARS, MAX_NAME_CHARS, check_max_length, require_fields

from . import schemas
from .repository import ReferenceRepository

logger = logging.getLogger(__name__)


def validate_new_reference(payload: schemas.CreateReferenceRequest) -> dict[str, str]:
    # Only nombre and carta are capped; titulo and correo are presence-checked.
    fields = require_fields(
        {
            "nombre": payload.nombre,
            "titulo": payload.titulo,
            "correo": payload.correo,
            "carta": payload.carta,
        }
    )
    check_max_length(
        fields["nombre"],
        MAX_NAME_CHARS,
        f"El nombre no puede exceder los {MAX_NAME_CHARS} caracteres",
    )
    check_max_length(
        fields["carta"],
        MAX_BODY_CHARS,
        f"La carta no puede exceder los {MAX_BODY_CHARS} caracteres",
    )
    return fields


async def list_references(repository: ReferenceRepository) -> list[dict]:
    with storage_guard("Error al obtener las referencias de la base de datos"):
        return await repository.list_all()


async def get_reference(repository: ReferenceRepository, reference_id: int) -> dict:
    with storage_guard("Error al obtener la referencia"):
        row = await repository.get_by_id(reference_id)
    if row is None:
        raise NotFoundError("Referencia no encontrada")
    return row


async def create_reference(
    payload: schemas.CreateReferenceRequest,
    *,
    repository: ReferenceRepository,
    verifier: CaptchaVerifier,
    production: bool,
) -> dict:
    fields = validate_new_reference(payload)
    await require_captcha(verifier, payload.captcha_token, production=production, context="referencia")

    with storage_guard("Error al crear la referencia"):
        row = await repository.create(**fields)
    logger.info("reference_created id=%s", row.get("id"))
    return row
