# src/dentalcare/api/main.py
from __future__ import annotations

import logging

from fastapi import FastAPI

from dentalcare.api.dashboard import router as dashboard_router
from dentalcare.api.entities import build_entity_routers
from dentalcare.config import get_settings
from dentalcare.core.error_handlers import register_error_handlers
from dentalcare.core.health import router as health_router
from dentalcare.core.logging import setup_json_logging
from dentalcare.core.middleware import RequestIDMiddleware

log = logging.getLogger("dentalcare.api")

APP_VERSION = "0.1.0"


def create_app() -> FastAPI:
    settings = get_settings()
    setup_json_logging()

    app = FastAPI(title=settings.APP_NAME, version=APP_VERSION, debug=settings.DEBUG)
    app.state.dashboard_top_n = settings.DASHBOARD_TOP_N

    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    app.include_router(health_router)
    app.include_router(dashboard_router)
    for router in build_entity_routers(search_limit=settings.SEARCH_RESULT_LIMIT):
        app.include_router(router)

    @app.get("/version")
    async def version():
        return {"api_version": APP_VERSION, "env": settings.ENV}

    log.info("%s %s configured env=%s", settings.APP_NAME, APP_VERSION, settings.ENV)
    return app
