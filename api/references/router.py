"""
Reference API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path, status

from core import dependencies
from core.captcha import CaptchaVerifier
from core.config import Settings
from core.validation import MAX_ROW_ID

from . import schemas, service
from .repository import ReferenceRepository

router = APIRouter(prefix="/api/referencias")


@router.get("")
async def list_references(
    repository: ReferenceRepository = Depends(dependencies.get_reference_repository),
) -> dict:
    rows = await service.list_references(repository)
    return {
        "success": True,
        "message": "Referencias obtenidas correctamente",
        "count": len(rows),
        "data": rows,
    }


@router.get("/{reference_id}")
async def get_reference(
    reference_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    repository: ReferenceRepository = Depends(dependencies.get_reference_repository),
) -> dict:
    row = await service.get_reference(repository, reference_id)
    return {"success": True, "data": row}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_reference(
    request: schemas.CreateReferenceRequest,
    repository: ReferenceRepository = Depends(dependencies.get_reference_repository),
    verifier: CaptchaVerifier = Depends(dependencies.get_captcha_verifier),
    settings: Settings = Depends(dependencies.get_settings),
) -> dict:
    row = await service.create_reference(
        request,
        repository=repository,
        verifier=verifier,
        production=settings.is_production,
    )
    return {
        "success": True,
        "message": "Referencia creada exitosamente",
        "data": row,
    }
