"""
Reference API schemas (request models).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CreateReferenceRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    nombre: str | None = None
    titulo: str | None = None
    correo: str | None = None
    carta: str | None = None
    captcha_token: str | None = Field(default=None, alias="captchaToken")
