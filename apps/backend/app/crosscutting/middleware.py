"""
===============================================================================
TARJETA CRC — crosscutting/middleware.py (Middlewares HTTP)
===============================================================================

Componentes:
  - RequestContextMiddleware: X-Request-Id + contexto de logs + log de acceso.
  - BodyLimitMiddleware: tope global del body (MAX_BODY_BYTES) antes de rutear.

Responsabilidades:
  - Aceptar el X-Request-Id del cliente (si es razonable) o generar uno.
  - Devolver el X-Request-Id en toda respuesta, incluida la 413 temprana.
  - Cortar con 413 problem+json por Content-Length declarado o, si el body
    llega en chunks, al superar el tope mientras se recibe.

Colaboradores:
  - app/context.py
  - crosscutting/error_responses.py (build_problem)
  - crosscutting/config.py (MAX_BODY_BYTES por defecto)

Notas:
  - El tope por archivo de avatar (MAX_UPLOAD_BYTES) lo aplica el storage;
    este middleware es la barrera general, más holgada.
===============================================================================
"""

from __future__ import annotations

import json
import time
import uuid

from fastapi import HTTPException
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..context import clear_context, set_request_context
from .config import get_settings
from .error_responses import PROBLEM_JSON_MEDIA_TYPE, ErrorCode, build_problem
from .logger import logger

REQUEST_ID_HEADER = "X-Request-Id"
MAX_REQUEST_ID_LENGTH = 128

# R: /health lo consultan orquestadores cada pocos segundos.
_UNLOGGED_PATHS = frozenset({"/health"})


def resolve_request_id(incoming: str | None) -> str:
    candidate = (incoming or "").strip()
    if 0 < len(candidate) <= MAX_REQUEST_ID_LENGTH and candidate.isprintable():
        return candidate
    return uuid.uuid4().hex


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Abre el contexto de logs del request y lo cierra siempre."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        set_request_context(
            request_id=request_id, method=request.method, path=request.url.path
        )
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request abortado por excepción",
                extra={"elapsed_ms": _elapsed_ms(started)},
            )
            clear_context()
            raise

        response.headers[REQUEST_ID_HEADER] = request_id
        if request.url.path not in _UNLOGGED_PATHS:
            logger.info(
                "request",
                extra={
                    "status_code": response.status_code,
                    "elapsed_ms": _elapsed_ms(started),
                },
            )
        clear_context()
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class BodyTooLargeError(HTTPException):
    """413 lanzado desde `receive`; FastAPI re-lanza HTTPException al parsear el body."""

    def __init__(self, max_bytes: int) -> None:
        super().__init__(status_code=413, detail=_too_large_detail(max_bytes))
        self.max_bytes = max_bytes


def _too_large_detail(max_bytes: int) -> str:
    return f"El body supera el máximo de {max_bytes} bytes."


class BodyLimitMiddleware:
    """ASGI puro: necesita envolver `receive`, cosa que BaseHTTPMiddleware no permite."""

    def __init__(self, app: ASGIApp, max_bytes: int | None = None) -> None:
        self.app = app
        self.max_bytes = max_bytes or get_settings().max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        request_id = resolve_request_id(headers.get(REQUEST_ID_HEADER))

        declared = headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_bytes:
            logger.warning(
                "body rechazado por Content-Length",
                extra={"content_length": int(declared), "max_bytes": self.max_bytes},
            )
            await self._reject(scope, send, request_id)
            return

        received = 0
        response_started = False

        async def counting_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    raise BodyTooLargeError(self.max_bytes)
            return message

        async def tracking_send(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, counting_receive, tracking_send)
        except BodyTooLargeError:
            if response_started:
                raise
            logger.warning(
                "body rechazado durante la lectura",
                extra={"received_bytes": received, "max_bytes": self.max_bytes},
            )
            await self._reject(scope, send, request_id)

    async def _reject(self, scope: Scope, send: Send, request_id: str) -> None:
        body = json.dumps(
            build_problem(
                status=413,
                code=ErrorCode.PAYLOAD_TOO_LARGE,
                detail=_too_large_detail(self.max_bytes),
                instance=scope.get("path", ""),
                request_id=request_id,
            ),
            ensure_ascii=False,
        ).encode("utf-8")
        await send(
            {
                "type": "http.response.start",
                "status": 413,
                "headers": [
                    (b"content-type", PROBLEM_JSON_MEDIA_TYPE.encode("latin-1")),
                    (b"content-length", str(len(body)).encode("latin-1")),
                    (REQUEST_ID_HEADER.lower().encode("latin-1"), request_id.encode("latin-1")),
                ],
            }
        )
        await send({"type": "http.response.body", "body": body})
