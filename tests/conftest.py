"""
Shared fixtures: in-memory repositories, a recording hCaptcha transport, and
app builders wired through `app.dependency_overrides`.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from datetime import datetime, timedelta
from urllib.parse import parse_qs

import httpx
import pytest
from fastapi.testclient import TestClient

from comments.repository import CommentPage
from core import dependencies
from core.captcha import CaptchaVerifier
from core.config import Settings
from core.errors import StorageError
from main import create_app

BASE_TIME = datetime(2026, 1, 1, 12, 0, 0)


def _formatted(ts: datetime) -> str:
    return ts.strftime("%d/%m/%Y %H:%M")


class InMemoryCommentRepository:
    def __init__(self) -> None:
        self.rows: list[dict] = []
        self._next_id = 1
        self.calls: list[str] = []

    async def list_page(self, page: int = 1, limit: int = 6) -> CommentPage:
        self.calls.append("list_page")
        ordered = sorted(self.rows, key=lambda r: r["fecha"], reverse=True)
        offset = (page - 1) * limit
        comments = [
            {**r, "fecha_formateada": _formatted(r["fecha"]), "fecha_original": r["fecha"]}
            for r in ordered[offset : offset + limit]
        ]
        return CommentPage(
            comments=comments,
            total_pages=math.ceil(len(self.rows) / limit),
            current_page=page,
            total_comments=len(self.rows),
        )

    async def get_by_id(self, comment_id: int) -> dict | None:
        self.calls.append("get_by_id")
        for row in self.rows:
            if row["id"] == comment_id:
                return {**row, "fecha_formateada": _formatted(row["fecha"])}
        return None

    async def create(self, *, nombre: str, comentario: str) -> dict:
        self.calls.append("create")
        row = {
            "id": self._next_id,
            "nombre": nombre,
            "comentario": comentario,
            "fecha": BASE_TIME + timedelta(minutes=self._next_id),
        }
        self._next_id += 1
        self.rows.append(row)
        return {**row, "fecha_formateada": _formatted(row["fecha"])}

    async def delete_by_id(self, comment_id: int) -> dict | None:
        self.calls.append("delete_by_id")
        for row in self.rows:
            if row["id"] == comment_id:
                self.rows.remove(row)
                return row
        return None

    async def get_stats(self) -> dict:
        self.calls.append("get_stats")
        if not self.rows:
            return {"total": 0, "primer_comentario": None, "ultimo_comentario": None}
        dates = [r["fecha"] for r in self.rows]
        return {
            "total": len(self.rows),
            "primer_comentario": min(dates).strftime("%d/%m/%Y"),
            "ultimo_comentario": max(dates).strftime("%d/%m/%Y"),
        }


class InMemoryReferenceRepository:
    def __init__(self) -> None:
        self.rows: list[dict] = []
        self._next_id = 1
        self.calls: list[str] = []

    async def list_all(self) -> list[dict]:
        self.calls.append("list_all")
        return sorted(self.rows, key=lambda r: r["fecha"], reverse=True)

    async def get_by_id(self, reference_id: int) -> dict | None:
        self.calls.append("get_by_id")
        return next((r for r in self.rows if r["id"] == reference_id), None)

    async def create(self, *, nombre: str, titulo: str, correo: str, carta: str) -> dict:
        self.calls.append("create")
        row = {
            "id": self._next_id,
            "nombre": nombre,
            "titulo": titulo,
            "correo": correo,
            "carta": carta,
            "fecha": BASE_TIME + timedelta(minutes=self._next_id),
        }
        self._next_id += 1
        self.rows.append(row)
        return row


class BrokenRepository:
    """Every call fails the way the store does when it is unreachable."""

    def __getattr__(self, name):
        async def _fail(*args, **kwargs):
            raise StorageError('relation "comentarios" does not exist')

        return _fail


class RecordingCaptchaTransport:
    """httpx.MockTransport handler that records each verification request."""

    def __init__(self, payload: object = None, *, status_code: int = 200, text: str | None = None) -> None:
        self.payload = {"success": True} if payload is None else payload
        self.status_code = status_code
        self.text = text
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.text is not None:
            return httpx.Response(self.status_code, text=self.text)
        return httpx.Response(self.status_code, json=self.payload)

    @property
    def forms(self) -> list[dict[str, list[str]]]:
        return [parse_qs(r.content.decode()) for r in self.requests]


def production_settings(**overrides) -> Settings:
    values = {"environment": "production", "hcaptcha_secret_key": "0xREALSECRET"}
    values.update(overrides)
    return Settings(**values)


def build_client(
    settings: Settings,
    *,
    comments=None,
    references=None,
    transport: Callable[[httpx.Request], httpx.Response] | None = None,
) -> TestClient:
    app = create_app(settings)
    verifier = CaptchaVerifier(
        settings.hcaptcha_secret_key,
        production=settings.is_production,
        verify_url=settings.hcaptcha_verify_url,
        transport=httpx.MockTransport(transport) if transport is not None else None,
    )
    app.dependency_overrides[dependencies.get_comment_repository] = lambda: comments
    app.dependency_overrides[dependencies.get_reference_repository] = lambda: references
    app.dependency_overrides[dependencies.get_captcha_verifier] = lambda: verifier
    # No `with` block: the lifespan (and its real pool) never starts.
    return TestClient(app)


@pytest.fixture
def comment_repo() -> InMemoryCommentRepository:
    return InMemoryCommentRepository()


@pytest.fixture
def reference_repo() -> InMemoryReferenceRepository:
    return InMemoryReferenceRepository()


@pytest.fixture
def client(comment_repo, reference_repo) -> TestClient:
    return build_client(Settings(), comments=comment_repo, references=reference_repo)
