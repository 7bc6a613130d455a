from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from spendwise.core.errors import GatewayError, NetworkError

from .config import settings
from .context import AppContext, build_context
from .routers import accounts, categories, dashboard, link, notifications, session, transactions, ui

logger = logging.getLogger("spendwise.frontend")


def _status_for(exc: GatewayError) -> int:
    if isinstance(exc, NetworkError):
        return 502
    if exc.status_code and 400 <= exc.status_code < 500:
        return exc.status_code
    return 400


def create_app(context: Optional[AppContext] = None) -> FastAPI:
    logging.basicConfig(level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Bootstrapping SpendWise client (gateway %s)", settings.api_url)
        await app.state.context.session.initialize_auth()
        yield
        await app.state.context.aclose()

    app = FastAPI(title=settings.title, version=settings.version, debug=settings.debug, lifespan=lifespan)
    app.state.context = context or build_context()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(GatewayError)
    async def _gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=_status_for(exc), content={"detail": exc.message, "error": exc.to_dict()})

    app.include_router(session.router)
    app.include_router(dashboard.router)
    app.include_router(notifications.router)
    app.include_router(ui.router)
    app.include_router(link.router)
    app.include_router(accounts.router)
    app.include_router(transactions.router)
    app.include_router(categories.router)

    return app
