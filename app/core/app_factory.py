from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.admin.api.v1.routes_admin import router as admin_router
from app.core.billing.api.v1.routes_billing import router as billing_router
from app.core.channel.api.v1.routes_cron import router as cron_router
from app.core.channel.telegram import ChannelMembership, TelegramBotClient
from app.core.config import Settings, settings as default_settings
from app.core.content.api.v1.routes_content import (
    admin_router as content_admin_router,
    router as content_router,
)
from app.core.messages.api.v1.routes_messages import (
    admin_router as messages_admin_router,
    router as messages_router,
)
from app.core.subscriptions.api.v1.routes_subscriptions import (
    router as subscriptions_router,
)
from app.database.session import create_db_engine, create_session_factory, init_db
from app.response import make_error_response
from app.response.response import APIError


def _error_json(code: str, http_code: int, message: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=http_code,
        content=jsonable_encoder(
            make_error_response(code=code, message=message, details=details)
        ),
    )


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return _error_json(exc.code, exc.http_code, exc.message, exc.details)


async def http_error_handler(
    request: Request,
    exc: StarletteHTTPException,
) -> JSONResponse:
    code = "NOT_FOUND" if exc.status_code == 404 else "HTTP_ERROR"
    return _error_json(code, exc.status_code, str(exc.detail), {"path": request.url.path})


async def validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    errors = exc.errors()
    fields = [".".join(str(part) for part in err.get("loc", ())) for err in errors]
    message = "Missing or invalid fields: " + ", ".join(fields) if fields else "Invalid request"
    return _error_json(
        "INVALID_ARGUMENT",
        400,
        message,
        [{"loc": err.get("loc"), "msg": err.get("msg")} for err in errors],
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error(
        "Unhandled API error on {method} {path}",
        method=request.method,
        path=request.url.path,
    )
    return _error_json("INTERNAL", 500, str(exc) or "Internal server error")


def create_app(
    settings: Optional[Settings] = None,
    *,
    telegram: Optional[TelegramBotClient] = None,
    channel: Optional[ChannelMembership] = None,
) -> FastAPI:
    settings = settings or default_settings

    engine = create_db_engine(settings.database_url)
    if settings.auto_create_tables:
        init_db(engine)

    telegram = telegram or TelegramBotClient.from_settings(settings)

    app = FastAPI(title="Bookflix API", version="1.0.0")
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.telegram = telegram
    app.state.channel = channel or telegram

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "X-Admin-Token", "Authorization"],
    )

    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/health", include_in_schema=False)
    def health() -> dict:
        db_ok = False
        db = app.state.session_factory()
        try:
            db.execute(text("SELECT 1"))
            db_ok = True
        except Exception as exc:
            logger.warning("Health check database error: {error}", error=str(exc))
        finally:
            db.close()

        return {
            "status": "ok" if db_ok else "degraded",
            "database": db_ok,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": "Bookflix API",
        }

    prefix = settings.api_prefix.rstrip("/")
    app.include_router(subscriptions_router, prefix=prefix)
    app.include_router(billing_router, prefix=prefix)
    app.include_router(messages_router, prefix=prefix)
    app.include_router(content_router, prefix=prefix)
    app.include_router(admin_router, prefix=prefix)
    app.include_router(messages_admin_router, prefix=prefix)
    app.include_router(content_admin_router, prefix=prefix)
    app.include_router(cron_router, prefix=prefix)

    return app


__all__ = ["create_app"]
