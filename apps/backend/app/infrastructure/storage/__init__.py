"""Adapters de infraestructura: Storage de avatars."""

from .errors import (
    StorageError,
    UnsupportedExtensionError,
    UnsupportedMediaTypeError,
    UploadAbortedError,
)
from .local_avatar_storage import (
    ALLOWED_EXTENSIONS,
    LocalAvatarStorage,
    StoredFile,
    iter_chunks,
)

__all__ = [
    "ALLOWED_EXTENSIONS",
    "LocalAvatarStorage",
    "StoredFile",
    "iter_chunks",
    "StorageError",
    "UnsupportedExtensionError",
    "UnsupportedMediaTypeError",
    "UploadAbortedError",
]
