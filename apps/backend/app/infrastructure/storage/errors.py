"""
===============================================================================
CRC CARD — infrastructure/storage/errors.py
===============================================================================

Componente:
  Errores tipados del storage de avatars

Responsabilidades:
  - Nombrar las fallas propias de una transferencia (tipo inválido,
    extensión no permitida, stream abortado).
  - Mantenerlas dentro de la taxonomía AppError (kind -> status HTTP).

Colaboradores:
  - crosscutting/exceptions.py (ValidationError, StorageError)
  - infrastructure/storage/local_avatar_storage.py
===============================================================================
"""

from ...crosscutting.exceptions import FieldError, StorageError, ValidationError

UPLOAD_FIELD = "avatar"


class UnsupportedMediaTypeError(ValidationError):
    """El media type declarado no es image/*."""

    def __init__(self, media_type: str | None):
        message = "Solo se permiten archivos de imagen."
        super().__init__(message, errors=[FieldError(UPLOAD_FIELD, message)])
        self.media_type = media_type


class UnsupportedExtensionError(ValidationError):
    """La extensión del archivo no está en la allowlist."""

    def __init__(self, extension: str, allowed: tuple[str, ...]):
        message = f"Extensión no permitida. Usar: {', '.join(allowed)}."
        super().__init__(message, errors=[FieldError(UPLOAD_FIELD, message)])
        self.extension = extension


class UploadAbortedError(ValidationError):
    """El stream de origen terminó con error antes de completarse."""

    def __init__(self, **kwargs):
        message = "La transferencia del archivo se interrumpió."
        super().__init__(
            message, errors=[FieldError(UPLOAD_FIELD, message)], **kwargs
        )


__all__ = [
    "UPLOAD_FIELD",
    "StorageError",
    "UnsupportedMediaTypeError",
    "UnsupportedExtensionError",
    "UploadAbortedError",
]
