"""
===============================================================================
TARJETA CRC — app/api/exception_handlers.py (Excepciones -> HTTP)
===============================================================================

Responsabilidades:
  - Mapear cada ErrorKind a (status, code) con una tabla exhaustiva.
  - RequestValidationError (schema pydantic) -> 400 con errores por campo.
  - HTTPException de Starlette (404/405 de routing) -> problem+json.
  - Cualquier otra excepción -> 500 genérico, con log completo.

Colaboradores:
  - crosscutting.exceptions: AppError y subclases
  - crosscutting.error_responses: ErrorCode, problem_response
  - crosscutting.config.get_settings: oculta detalles 5xx en producción

Reglas:
  - 401/403 nunca llevan `errors` (no se revela qué falló).
  - 401 siempre lleva `WWW-Authenticate: Bearer`.
===============================================================================
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import ErrorCode, problem_response
from ..crosscutting.exceptions import AppError, ErrorKind, ValidationError
from ..crosscutting.logger import logger

STATUS_BY_KIND: dict[ErrorKind, tuple[int, ErrorCode]] = {
    ErrorKind.VALIDATION: (400, ErrorCode.VALIDATION_ERROR),
    ErrorKind.CONFLICT: (409, ErrorCode.CONFLICT),
    ErrorKind.UNAUTHORIZED: (401, ErrorCode.UNAUTHORIZED),
    ErrorKind.FORBIDDEN: (403, ErrorCode.FORBIDDEN),
    ErrorKind.NOT_FOUND: (404, ErrorCode.NOT_FOUND),
    ErrorKind.PAYLOAD_TOO_LARGE: (413, ErrorCode.PAYLOAD_TOO_LARGE),
    ErrorKind.INTERNAL: (500, ErrorCode.INTERNAL_ERROR),
}
# R: Un ErrorKind nuevo sin fila en la tabla rompe el import.
assert set(STATUS_BY_KIND) == set(ErrorKind), "ErrorKind sin mapeo HTTP"

_ROUTING_CODES: dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.METHOD_NOT_ALLOWED,
    413: ErrorCode.PAYLOAD_TOO_LARGE,
    503: ErrorCode.SERVICE_UNAVAILABLE,
}

_PUBLIC_INTERNAL_DETAIL = "Error interno."
_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}

# pydantic antepone el origen del dato al loc: ("body", "email") -> "email".
_LOC_ORIGINS = frozenset({"body", "query", "path", "header", "cookie"})


def field_name(loc: tuple | list) -> str:
    parts = [str(p) for p in loc]
    if parts and parts[0] in _LOC_ORIGINS:
        parts = parts[1:]
    return ".".join(parts) or "body"


def _internal_detail(message: str) -> str:
    return _PUBLIC_INTERNAL_DETAIL if get_settings().is_production() else message


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    status, code = STATUS_BY_KIND[exc.kind]
    log_extra = {"code": code.value, "error_id": exc.error_id, "reason": exc.message}

    if status >= 500:
        logger.error("error interno", exc_info=exc.original_error or exc, extra=log_extra)
        detail = _internal_detail(exc.message)
    else:
        logger.warning("request rechazado", extra=log_extra)
        detail = exc.message

    errors = None
    if isinstance(exc, ValidationError) and exc.errors:
        errors = [e.to_dict() for e in exc.errors]

    return problem_response(
        request,
        status=status,
        code=code,
        detail=detail,
        errors=errors,
        headers=_BEARER_CHALLENGE if exc.kind is ErrorKind.UNAUTHORIZED else None,
    )


async def handle_request_validation(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {"field": field_name(e.get("loc", ())), "message": e.get("msg", "")}
        for e in exc.errors()
    ]
    logger.warning(
        "schema de request inválido", extra={"fields": [e["field"] for e in errors]}
    )
    return problem_response(
        request,
        status=400,
        code=ErrorCode.VALIDATION_ERROR,
        detail="Datos de entrada inválidos.",
        errors=errors,
    )


async def handle_http_exception(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return problem_response(
        request,
        status=exc.status_code,
        code=_ROUTING_CODES.get(exc.status_code, ErrorCode.INTERNAL_ERROR),
        detail=str(exc.detail),
        headers=exc.headers,
    )


async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.error("excepción no controlada", exc_info=exc)
    return problem_response(
        request,
        status=500,
        code=ErrorCode.INTERNAL_ERROR,
        detail=_internal_detail(f"{type(exc).__name__}: {exc}"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected)


__all__ = ["STATUS_BY_KIND", "field_name", "register_exception_handlers"]
