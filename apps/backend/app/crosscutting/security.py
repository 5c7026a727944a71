"""
===============================================================================
TARJETA CRC — crosscutting/security.py (Headers de hardening)
===============================================================================

Responsabilidades:
  - Agregar a cada respuesta los headers que en Express pondría helmet
    (nosniff, frame deny, referrer policy, permissions policy, CSP).
  - Permitir que los avatares se embeban desde otro origen (CORP cross-origin).
  - Marcar las respuestas de /api como no cacheables (llevan datos de cuenta).
  - HSTS solo en producción y solo si el request llegó por HTTPS.

Colaboradores:
  - crosscutting.config.get_settings (APP_ENV)

Notas:
  - /docs y /redoc cargan Swagger/ReDoc desde jsdelivr: CSP propia.
===============================================================================
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from . import config

_STATIC_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Resource-Policy": "cross-origin",
    "Permissions-Policy": "camera=(), geolocation=(), microphone=(), payment=()",
}

_API_CSP = "default-src 'none'; frame-ancestors 'none'"
_DEV_CSP = "default-src 'self'; img-src 'self' data:; style-src 'self' 'unsafe-inline'"
_DOCS_CSP = (
    "default-src 'self'; "
    "script-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "style-src 'self' 'unsafe-inline' https://cdn.jsdelivr.net; "
    "img-src 'self' data: https://fastapi.tiangolo.com"
)
_DOCS_PREFIXES = ("/docs", "/redoc")
_HSTS = "max-age=31536000; includeSubDomains"


def _request_is_https(request: Request) -> bool:
    forwarded = request.headers.get("x-forwarded-proto", "")
    proto = forwarded.split(",")[0].strip() or request.url.scheme
    return proto.lower() == "https"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp) -> None:
        super().__init__(app)
        self.production = config.get_settings().is_production()

    def _csp_for(self, path: str) -> str:
        if path.startswith(_DOCS_PREFIXES):
            return _DOCS_CSP
        return _API_CSP if self.production else _DEV_CSP

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        path = request.url.path

        response.headers.update(_STATIC_HEADERS)
        response.headers["Content-Security-Policy"] = self._csp_for(path)
        if path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store"
        if self.production and _request_is_https(request):
            response.headers["Strict-Transport-Security"] = _HSTS
        return response
