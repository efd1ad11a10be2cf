"""
Error taxonomy shared by every feature.

Each error carries the HTTP status and the user-safe message that ends up in the
`{"success": false, "error": ...}` envelope. Internal detail stays on the chained
cause and only reaches the logs.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager


class PortfolioError(RuntimeError):
    status_code = 500
    default_message = "Error interno del servidor"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(PortfolioError):
    status_code = 400
    default_message = "Datos de entrada no válidos"


class NotFoundError(PortfolioError):
    status_code = 404
    default_message = "Recurso no encontrado"


class CaptchaRejected(PortfolioError):
    status_code = 400
    default_message = "Captcha no válido. Por favor, inténtalo de nuevo."


class VerificationError(PortfolioError):
    status_code = 500
    default_message = "Error al verificar el captcha"


VerificationTransportError = VerificationError


class StorageError(PortfolioError):
    status_code = 500
    default_message = "Error al acceder a la base de datos"


@contextmanager
def storage_guard(message: str) -> Iterator[None]:
    """
    Replace the message of a `StorageError` raised inside the block with `message`.

    The original error stays attached as `__cause__` for logging.
    """
    try:
        yield
    except StorageError as exc:
        raise StorageError(message) from exc
