"""
hCaptcha verification client.

Used endpoint:
- POST /siteverify (form: secret, response) -> {"success": bool, ...}

Outside production, or while no real secret is configured, verification is skipped
and every token is accepted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import httpx

from .config import DEFAULT_HCAPTCHA_VERIFY_URL
from .errors import CaptchaRejected, VerificationError

logger = logging.getLogger(__name__)

# Marker used by the `.env` template for unset secrets.
PLACEHOLDER_MARKER = "ES_"


@dataclass(frozen=True)
class VerificationResult:
    accepted: bool
    raw: dict[str, Any] = field(default_factory=dict)


def _has_real_secret(secret_key: str) -> bool:
    secret_key = (secret_key or "").strip()
    return bool(secret_key) and PLACEHOLDER_MARKER not in secret_key


class CaptchaVerifier:
    def __init__(
        self,
        secret_key: str,
        *,
        production: bool,
        verify_url: str = DEFAULT_HCAPTCHA_VERIFY_URL,
        timeout_s: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._secret_key = (secret_key or "").strip()
        self._production = production
        self._verify_url = verify_url
        self._timeout_s = timeout_s
        self._transport = transport

    @property
    def bypassed(self) -> bool:
        return not self._production or not _has_real_secret(self._secret_key)

    async def verify(self, token: str) -> VerificationResult:
        """
        Submit `token` to hCaptcha and report whether it was accepted.

        Raises `VerificationError` when the call fails or the body is not a JSON object.
        An explicit rejection is a normal result with `accepted=False`.
        """
        if self.bypassed:
            return VerificationResult(
                accepted=True,
                raw={
                    "success": True,
                    "challenge_ts": datetime.now(timezone.utc).isoformat(),
                    "hostname": "localhost",
                },
            )

        try:
            async with httpx.AsyncClient(timeout=self._timeout_s, transport=self._transport) as client:
                resp = await client.post(
                    self._verify_url,
                    data={"secret": self._secret_key, "response": token or ""},
                )
        except httpx.HTTPError as exc:
            raise VerificationError() from exc

        try:
            data = resp.json()
        except ValueError as exc:
            # Avoid dumping huge bodies; include a small snippet.
            logger.error(
                "captcha_unparseable_response status=%s body=%s",
                resp.status_code,
                resp.text[:200],
            )
            raise VerificationError() from exc

        if not isinstance(data, dict):
            raise VerificationError()

        return VerificationResult(accepted=data.get("success") is True, raw=data)


async def require_captcha(
    verifier: CaptchaVerifier,
    token: str | None,
    *,
    production: bool,
    context: str,
) -> None:
    """
    Gate a write on captcha verification. No-op outside production.

    `context` names the resource being written, for the logs.
    """
    if not production:
        return None

    if not (token or "").strip():
        raise CaptchaRejected("Captcha requerido")

    result = await verifier.verify(token)
    if not result.accepted:
        logger.info(
            "captcha_rejected context=%s error_codes=%s",
            context,
            result.raw.get("error-codes"),
        )
        raise CaptchaRejected()
    return None
