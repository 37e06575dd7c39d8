"""Главный модуль FastAPI приложения."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import yaml
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1 import health, pull_requests, stats, teams, users
from app.core.config import Settings, settings
from app.core.database import close_db, init_db
from app.core.exceptions import (
    ServiceException,
    http_exception_handler,
    service_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from app.core.logging import setup_logging
from app.core.metrics import metrics_endpoint

logger = logging.getLogger(__name__)

OPENAPI_PATH = Path(__file__).parent.parent / "openapi.yml"


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await init_db()
    logger.info("PR reviewer assignment service started")
    yield
    await close_db()
    logger.info("PR reviewer assignment service stopped")


def _use_static_openapi(app: FastAPI, path: Path = OPENAPI_PATH) -> None:
    """Отдавать /openapi.json из рукописного openapi.yml вместо сгенерированной схемы."""

    def openapi():
        if app.openapi_schema is None:
            with open(path, "r", encoding="utf-8") as f:
                app.openapi_schema = yaml.load(f, Loader=yaml.BaseLoader)
        return app.openapi_schema

    app.openapi = openapi


def _register_exception_handlers(app: FastAPI) -> None:
    # от частного к общему; Exception ловит всё остальное и отдаёт 500
    app.add_exception_handler(ServiceException, service_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


def create_app(config: Settings = settings) -> FastAPI:
    """Собрать приложение: роутеры, обработчики ошибок, метрики."""
    application = FastAPI(
        title="PR Reviewer Assignment Service",
        version="1.0.0",
        lifespan=lifespan,
        debug=config.DEBUG,
    )
    _use_static_openapi(application)
    _register_exception_handlers(application)

    for module in (health, teams, users, pull_requests, stats):
        application.include_router(module.router)

    if config.METRICS_ENABLED:
        application.add_route(
            "/metrics", metrics_endpoint, methods=["GET"], include_in_schema=False
        )
    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    setup_logging()
    uvicorn.run(app, host=settings.APP_HOST, port=settings.APP_PORT)
