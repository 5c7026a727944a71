"""
===============================================================================
TARJETA CRC — app/context.py (Contexto por request)
===============================================================================

Responsabilidades:
  - Guardar los datos de correlación del request en curso (ContextVars).
  - Exponerlos como dict plano para el logger.
  - Resetear el contexto al terminar cada request.

Colaboradores:
  - crosscutting.middleware.RequestContextMiddleware: abre y cierra el contexto.
  - identity.auth_users.require_identity: agrega user_id tras verificar el token.
  - crosscutting.logger.JSONFormatter: lee get_context_dict().

Restricciones:
  - Valores siempre str; "" equivale a "sin dato" y no se loguea.
===============================================================================
"""

from __future__ import annotations

from contextvars import ContextVar

CONTEXT_FIELDS: tuple[str, ...] = ("request_id", "method", "path", "user_id")

_vars: dict[str, ContextVar[str]] = {
    name: ContextVar(f"users_api_{name}", default="") for name in CONTEXT_FIELDS
}


def _bind(**values: object) -> None:
    for name, value in values.items():
        _vars[name].set("" if value is None else str(value))


def set_request_context(*, request_id: str, method: str, path: str) -> None:
    _bind(request_id=request_id, method=method, path=path, user_id="")


def set_user_context(user_id: int | str | None) -> None:
    _bind(user_id=user_id)


def get_request_id() -> str:
    return _vars["request_id"].get()


def get_context_dict() -> dict[str, str]:
    """Snapshot del contexto actual sin las claves vacías."""
    return {name: var.get() for name, var in _vars.items() if var.get()}


def clear_context() -> None:
    _bind(**{name: "" for name in CONTEXT_FIELDS})
