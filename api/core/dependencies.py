"""
FastAPI dependencies that hand out the objects built in the app lifespan.

Tests replace these through `app.dependency_overrides`.
"""

from __future__ import annotations

from fastapi import Request

from comments.repository import CommentRepository
from references.repository import ReferenceRepository

from .captcha import CaptchaVerifier
from .config import Settings


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_comment_repository(request: Request) -> CommentRepository:
    return request.app.state.comment_repository


def get_reference_repository(request: Request) -> ReferenceRepository:
    return request.app.state.reference_repository


def get_captcha_verifier(request: Request) -> CaptchaVerifier:
    return request.app.state.captcha_verifier
