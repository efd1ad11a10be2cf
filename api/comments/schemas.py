"""
Comment API schemas (request models).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CreateCommentRequest(BaseModel):
    # Presence and length are checked by the service so the 400 messages stay uniform.
    model_config = ConfigDict(populate_by_name=True)

    nombre: str | None = None
    comentario: str | None = None
    captcha_token: str | None = Field(default=None, alias="captchaToken")
