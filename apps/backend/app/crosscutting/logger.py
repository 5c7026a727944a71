"""
===============================================================================
TARJETA CRC — crosscutting/logger.py (Logging estructurado)
===============================================================================

Responsabilidades:
  - Emitir una línea JSON por evento en stdout (LOG_JSON=true) o texto plano.
  - Adjuntar el contexto del request (request_id, method, path, user_id).
  - Enmascarar credenciales: passwords, hashes, tokens y el header Authorization
    nunca llegan a la salida, aunque se pasen por `extra=`.

Colaboradores:
  - app/context.py: get_context_dict()
  - crosscutting/config.py: LOG_LEVEL / LOG_JSON

Notas:
  - `logger` es el único logger de la app ("users-api").
===============================================================================
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from ..context import get_context_dict
from .config import get_settings

LOGGER_NAME = "users-api"
REDACTED = "[redacted]"

# R: Se comparan en minúsculas y sin "_" / "-" (confirmPassword == confirm_password).
_SENSITIVE_KEYS = frozenset(
    {
        "password",
        "confirmpassword",
        "passwordhash",
        "token",
        "accesstoken",
        "authorization",
        "jwtsecret",
        "secret",
        "databaseurl",
    }
)

_MAX_VALUE_CHARS = 4_000

# Atributos estándar de LogRecord; el resto vino por `extra=`.
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {
    "message",
    "asctime",
}


def _normalize_key(key: str) -> str:
    return key.lower().replace("_", "").replace("-", "")


def redact(value: Any, key: str | None = None) -> Any:
    """Copia `value` enmascarando claves sensibles (recursivo en dict/list)."""
    if key is not None and _normalize_key(key) in _SENSITIVE_KEYS:
        return REDACTED
    if isinstance(value, dict):
        return {str(k): redact(v, str(k)) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [redact(v) for v in value]
    if isinstance(value, (bytes, bytearray)):
        return f"<{len(value)} bytes>"
    if isinstance(value, str) and len(value) > _MAX_VALUE_CHARS:
        return value[:_MAX_VALUE_CHARS] + "..."
    return value


class JSONFormatter(logging.Formatter):
    """LogRecord -> objeto JSON de una línea."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "where": f"{record.module}:{record.lineno}",
        }
        entry.update(get_context_dict())

        for name, value in record.__dict__.items():
            if name not in _RECORD_ATTRS:
                entry[name] = redact(value, name)

        if record.exc_info and record.exc_info[0] is not None:
            entry["exc_type"] = record.exc_info[0].__name__
            entry["exc"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class PlainFormatter(logging.Formatter):
    """Formato legible para desarrollo; agrega request_id si hay."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)-7s %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        request_id = get_context_dict().get("request_id")
        return f"{line} [{request_id}]" if request_id else line


def _resolve_preferences() -> tuple[int, bool]:
    # R: Si Settings es inválido, se loguea igual (INFO + JSON) para poder
    #    reportar el error de configuración.
    try:
        settings = get_settings()
    except ValueError:
        return logging.INFO, True
    level = logging.getLevelName((settings.log_level or "INFO").upper())
    return (level if isinstance(level, int) else logging.INFO), settings.log_json


def setup_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Configura (una sola vez) el logger de la app."""
    log = logging.getLogger(name)
    level, as_json = _resolve_preferences()
    log.setLevel(level)

    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JSONFormatter() if as_json else PlainFormatter())
        log.addHandler(handler)
    return log


logger = setup_logger()
