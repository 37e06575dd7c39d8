"""Обработка исключений."""

import logging

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ServiceException(HTTPException):
    """Базовое исключение сервиса."""

    def __init__(
        self, error_code: str, message: str, http_status: int = status.HTTP_400_BAD_REQUEST
    ):
        super().__init__(status_code=http_status, detail={"code": error_code, "message": message})

    @property
    def code(self) -> str:
        return self.detail["code"]

    @property
    def message(self) -> str:
        return self.detail["message"]


class TeamExistsException(ServiceException):
    """Команда уже существует."""

    def __init__(self):
        super().__init__("TEAM_EXISTS", "team_name already exists", status.HTTP_400_BAD_REQUEST)


class NotFoundException(ServiceException):
    """Ресурс не найден."""

    def __init__(self, resource: str = "resource"):
        super().__init__("NOT_FOUND", f"{resource} not found", status.HTTP_404_NOT_FOUND)


class PRExistsException(ServiceException):
    """PR уже существует."""

    def __init__(self):
        super().__init__("PR_EXISTS", "PR id already exists", status.HTTP_409_CONFLICT)


class PRMergedException(ServiceException):
    """PR уже в статусе MERGED."""

    def __init__(self):
        super().__init__("PR_MERGED", "cannot reassign on merged PR", status.HTTP_409_CONFLICT)


class NotAssignedException(ServiceException):
    """Ревьювер не назначен на PR."""

    def __init__(self):
        super().__init__(
            "NOT_ASSIGNED", "reviewer is not assigned to this PR", status.HTTP_409_CONFLICT
        )


class NoCandidateException(ServiceException):
    """Нет доступных кандидатов для переназначения."""

    def __init__(
        self,
        message: str = "no active replacement candidate in team",
        http_status: int = status.HTTP_409_CONFLICT,
    ):
        super().__init__("NO_CANDIDATE", message, http_status)


class InvalidRequestException(ServiceException):
    """Некорректный запрос."""

    def __init__(self, message: str = "invalid request body"):
        super().__init__("INVALID_REQUEST", message, status.HTTP_400_BAD_REQUEST)


async def service_exception_handler(request: Request, exc: ServiceException) -> JSONResponse:
    """Обработчик исключений сервиса."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Обработчик HTTP исключений."""
    code = "NOT_FOUND" if exc.status_code == status.HTTP_404_NOT_FOUND else "INVALID_REQUEST"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": code, "message": str(exc.detail)}},
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Обработчик ошибок валидации."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "error": {
                "code": "INVALID_REQUEST",
                "message": "invalid request body",
                "details": jsonable_errors(exc),
            }
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Обработчик непредвиденных ошибок: текст ошибки хранилища клиенту не отдаём."""
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": {"code": "INTERNAL_ERROR", "message": "internal server error"}},
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in exc.errors()
    ]
