import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from comments import router as comments_router
from comments.repository import CommentRepository
from core import dependencies
from core.captcha import CaptchaVerifier
from core.config import Settings
from core.db import Database
from core.errors import PortfolioError, StorageError
from core.logging_config import setup_logging
from references import router as references_router
from references.repository import ReferenceRepository

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "Content-Security-Policy": (
        "default-src 'self'; script-src 'self'; style-src 'self'; "
        "img-src 'self' data: https:; font-src 'self'; connect-src 'self' https://hcaptcha.com;"
    ),
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
}

ENDPOINTS = {
    "referencias": {
        "getAll": "GET /api/referencias",
        "getById": "GET /api/referencias/:id",
        "create": "POST /api/referencias",
    },
    "comments": {
        "getAll": "GET /api/comments?page=1&limit=6",
        "getById": "GET /api/comments/:id",
        "create": "POST /api/comments",
        "delete": "DELETE /api/comments/:id (admin)",
        "stats": "GET /api/comments/stats",
    },
    "health": "GET /api/health",
}

AVAILABLE_ENDPOINTS = {
    "home": "GET /",
    "health": "GET /api/health",
    "references": ["GET /api/referencias", "POST /api/referencias"],
    "comments": ["GET /api/comments", "POST /api/comments"],
}


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message, **extra})


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    # One pool per process, handed to the repositories. An unreachable store
    # does not stop startup; queries fail with StorageError until it is back.
    database = await Database.connect(settings)
    try:
        if settings.db_auto_create_schema and database.connected:
            try:
                await database.apply_schema()
            except StorageError as exc:
                logger.error("schema_apply_failed error=%s", exc.message)
        app.state.database = database
        app.state.comment_repository = CommentRepository(database)
        app.state.reference_repository = ReferenceRepository(database)
        logger.info(
            "server_started port=%s environment=%s database=%s captcha=%s",
            settings.port,
            settings.environment,
            settings.db_name,
            "bypassed" if app.state.captcha_verifier.bypassed else "enabled",
        )
        yield
    finally:
        await database.close()


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(PortfolioError)
    async def portfolio_error_handler(request: Request, exc: PortfolioError) -> JSONResponse:
        if exc.status_code >= 500:
            cause = exc.__cause__ or exc
            logger.error(
                "request_failed method=%s path=%s error=%s",
                request.method,
                request.url.path,
                exc.message,
                exc_info=(type(cause), cause, cause.__traceback__),
            )
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        fields = set()
        for err in exc.errors():
            parts = [p for p in err.get("loc", ()) if isinstance(p, str) and p not in ("body", "path", "query")]
            if parts:
                fields.add(".".join(parts))
        fields = sorted(fields)
        message = "Datos de entrada no válidos"
        if fields:
            message = f"{message}: {', '.join(fields)}"
        return _error(400, message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return _error(
                404,
                f"Ruta no encontrada: {request.url.path}",
                suggestion="Visita la ruta raíz (/) para ver los endpoints disponibles",
                available_endpoints=AVAILABLE_ENDPOINTS,
            )
        return _error(exc.status_code, str(exc.detail))


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level)

    app = FastAPI(title="Portfolio API", version=settings.version, lifespan=lifespan)
    app.state.settings = settings
    app.state.started_at = time.monotonic()
    app.state.captcha_verifier = CaptchaVerifier(
        settings.hcaptcha_secret_key,
        production=settings.is_production,
        verify_url=settings.hcaptcha_verify_url,
        timeout_s=settings.hcaptcha_timeout,
    )

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        return response

    # Production trusts CORS_ORIGIN; development only the local frontend dev server.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(references_router.router, tags=["referencias"])
    app.include_router(comments_router.router, tags=["comments"])

    @app.get("/")
    def root() -> dict:
        return {
            "success": True,
            "status": "success",
            "message": "API del Portafolio funcionando correctamente",
            "version": settings.version,
            "documentation": "Consulta los endpoints disponibles",
            "environment": settings.environment,
            "timestamp": _utc_now_iso(),
            "endpoints": ENDPOINTS,
        }

    @app.get("/api/health")
    async def health(
        request: Request,
        repository: CommentRepository = Depends(dependencies.get_comment_repository),
    ) -> JSONResponse:
        # The stats query doubles as a store liveness check.
        try:
            await repository.get_stats()
        except StorageError as exc:
            logger.error("health_check_failed error=%s", exc.message)
            return JSONResponse(
                status_code=500,
                content={
                    "success": False,
                    "status": "unhealthy",
                    "error": exc.message,
                    "database": "disconnected",
                    "timestamp": _utc_now_iso(),
                },
            )

        return JSONResponse(
            content={
                "success": True,
                "status": "healthy",
                "message": "Servidor y base de datos funcionando correctamente",
                "timestamp": _utc_now_iso(),
                "uptime": round(time.monotonic() - request.app.state.started_at, 3),
                "database": {
                    "status": "connected",
                    "type": "PostgreSQL",
                    "environment": settings.environment,
                },
                "environment": settings.environment,
                "version": settings.version,
            }
        )

    return app


app = create_app()


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=app.state.settings.port)
