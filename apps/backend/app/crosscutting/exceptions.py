"""
===============================================================================
TARJETA CRC — crosscutting/exceptions.py (Errores de aplicación)
===============================================================================

Responsabilidades:
  - Una subclase de AppError por ErrorKind; la capa HTTP traduce el kind
    a status + code (problem+json) sin mirar el tipo concreto.
  - message apto para el cliente (nunca passwords, hashes ni tokens).
  - error_id por instancia para cruzar la respuesta con los logs.
  - ValidationError lleva FieldError[] (campo + mensaje).

Colaboradores:
  - api/exception_handlers.py
  - application/usecases/*, identity/*, infrastructure/storage/*
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from uuid import uuid4


class ErrorKind(str, Enum):
    """Tipos de error que la API sabe traducir."""

    VALIDATION = "VALIDATION"
    CONFLICT = "CONFLICT"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    INTERNAL = "INTERNAL"


@dataclass(frozen=True, slots=True)
class FieldError:
    """Detalle de validación de un campo."""

    field: str
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class AppError(Exception):
    """Base: kind + message + error_id (+ causa original, solo para logs)."""

    kind: ErrorKind = ErrorKind.INTERNAL
    default_message: str = "Ocurrió un error inesperado."

    def __init__(
        self,
        message: str | None = None,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message or self.default_message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(self.message)


class ValidationError(AppError):
    """Input malformado, detectado antes de cualquier efecto."""

    kind = ErrorKind.VALIDATION
    default_message = "Datos inválidos."

    def __init__(
        self,
        message: str | None = None,
        errors: list[FieldError] | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.errors: list[FieldError] = list(errors or [])

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, errors=[FieldError(field=field, message=message)])


class ConflictError(AppError):
    """Violación de unicidad (email)."""

    kind = ErrorKind.CONFLICT
    default_message = "El recurso ya existe."


class UnauthorizedError(AppError):
    """Token ausente/inválido/expirado o credenciales incorrectas."""

    kind = ErrorKind.UNAUTHORIZED
    default_message = "Autenticación requerida."


class ForbiddenError(AppError):
    """Identidad válida sin privilegio u ownership suficiente."""

    kind = ErrorKind.FORBIDDEN
    default_message = "Acceso denegado."


class NotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND
    default_message = "Recurso no encontrado."

    def __init__(self, resource: str, identifier: object, **kwargs):
        super().__init__(f"{resource} '{identifier}' no encontrado", **kwargs)
        self.resource = resource
        self.identifier = identifier


class PayloadTooLargeError(AppError):
    kind = ErrorKind.PAYLOAD_TOO_LARGE

    def __init__(self, max_bytes: int, **kwargs):
        super().__init__(
            f"El archivo excede el máximo permitido ({max_bytes} bytes).", **kwargs
        )
        self.max_bytes = max_bytes


class InternalError(AppError):
    """Cualquier falla inesperada (storage caído, etc.)."""

    kind = ErrorKind.INTERNAL


class DatabaseError(InternalError):
    """Errores de DB (conexión, query, timeout, pool)."""

    default_message = "Falla en operación de base de datos."


class StorageError(InternalError):
    """Errores de escritura/lectura en el storage de avatars."""

    default_message = "Falla en el storage de archivos."
