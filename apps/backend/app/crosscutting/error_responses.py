"""
===============================================================================
TARJETA CRC — crosscutting/error_responses.py (Problem Details, RFC 7807)
===============================================================================

Responsabilidades:
  - Catálogo de códigos estables para clientes (ErrorCode).
  - Modelo del cuerpo de error (ProblemDetail) y su serialización.
  - Construir la JSONResponse `application/problem+json`.
  - Declarar las respuestas de error en OpenAPI para los routers.

Colaboradores:
  - api/exception_handlers.py: traduce excepciones a problem_response().
  - crosscutting/middleware.py: 413 temprano con build_problem().
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from http import HTTPStatus
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

PROBLEM_JSON_MEDIA_TYPE = "application/problem+json"


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    CONFLICT = "CONFLICT"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class FieldProblem(BaseModel):
    field: str
    message: str


class ProblemDetail(BaseModel):
    """Cuerpo de error. `errors` solo aparece en fallas de validación."""

    type: str = "about:blank"
    title: str
    status: int
    detail: str
    code: ErrorCode
    instance: str | None = None
    errors: list[FieldProblem] | None = None
    request_id: str | None = None


def build_problem(
    *,
    status: int,
    code: ErrorCode,
    detail: str,
    instance: str | None = None,
    errors: list[dict[str, Any]] | None = None,
    request_id: str | None = None,
) -> dict[str, Any]:
    try:
        title = HTTPStatus(status).phrase
    except ValueError:
        title = code.value.replace("_", " ").title()

    problem = ProblemDetail(
        title=title,
        status=status,
        detail=detail,
        code=code,
        instance=instance,
        errors=[FieldProblem(**e) for e in errors] if errors else None,
        request_id=request_id or None,
    )
    return problem.model_dump(mode="json", exclude_none=True)


def problem_response(
    request: Request,
    *,
    status: int,
    code: ErrorCode,
    detail: str,
    errors: list[dict[str, Any]] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status,
        content=build_problem(
            status=status,
            code=code,
            detail=detail,
            instance=request.url.path,
            errors=errors,
            request_id=getattr(request.state, "request_id", None),
        ),
        headers=headers,
        media_type=PROBLEM_JSON_MEDIA_TYPE,
    )


def _documented(status: int) -> dict[str, Any]:
    return {
        "description": HTTPStatus(status).phrase,
        "model": ProblemDetail,
        "content": {
            PROBLEM_JSON_MEDIA_TYPE: {"schema": {"$ref": "#/components/schemas/ProblemDetail"}}
        },
    }


OPENAPI_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    status: _documented(status) for status in (400, 401, 403, 404, 409, 413)
}
