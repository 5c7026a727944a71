"""
===============================================================================
CRC CARD — infrastructure/storage/local_avatar_storage.py
===============================================================================

Clase:
  LocalAvatarStorage (Adapter de disco local)

Responsabilidades:
  - Aceptar un stream de bytes declarado como imagen y persistirlo en disco.
  - Rechazar media types no image/* y extensiones fuera de la allowlist
    ANTES de leer un solo byte.
  - Generar el nombre almacenado: user_<owner>_<uuid4hex>.<ext>.
  - Limitar el tamaño contando bytes por chunk (no confía en Content-Length).
  - Garantizar que un archivo parcial nunca sobreviva a un error/abort.
  - Borrar avatars previos (best-effort) a partir de su URL pública.

Colaboradores:
  - aiofiles (escritura async, no bloquea el event loop)
  - crosscutting.exceptions (PayloadTooLargeError / StorageError)
  - infrastructure.storage.errors (errores de validación del upload)

Decisiones de diseño:
  - El nombre del cliente solo aporta la extensión (nunca directorios).
  - open(..., "xb"): un nombre colisionado falla en vez de pisar otro archivo.
  - La falla de limpieza se loguea y no reemplaza al error original.
===============================================================================
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path, PurePath
from typing import AsyncIterator, Protocol
from uuid import uuid4

import aiofiles
import aiofiles.os
from starlette.concurrency import run_in_threadpool

from ...crosscutting.exceptions import AppError, PayloadTooLargeError, StorageError
from ...crosscutting.logger import logger
from .errors import (
    UnsupportedExtensionError,
    UnsupportedMediaTypeError,
    UploadAbortedError,
)

ALLOWED_EXTENSIONS: tuple[str, ...] = ("jpg", "jpeg", "png", "gif", "webp")

# R: Solo se usa cuando el nombre del cliente no trae extensión.
_EXTENSION_BY_MEDIA_TYPE = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}

DEFAULT_CHUNK_SIZE = 64 * 1024

_STORED_NAME_RE = re.compile(
    r"^user_\d+_[0-9a-f]{32}\.(?:" + "|".join(ALLOWED_EXTENSIONS) + r")$"
)


@dataclass(frozen=True, slots=True)
class StoredFile:
    """Descriptor del archivo persistido."""

    stored_path: Path
    stored_filename: str
    public_url: str


class ChunkReader(Protocol):
    async def read(self, size: int = -1) -> bytes: ...


async def iter_chunks(
    reader: ChunkReader, chunk_size: int = DEFAULT_CHUNK_SIZE
) -> AsyncIterator[bytes]:
    """Adapta un objeto con `await read(n)` (ej: UploadFile) a un stream de chunks."""
    while True:
        chunk = await reader.read(chunk_size)
        if not chunk:
            return
        yield chunk


def resolve_extension(filename: str | None, media_type: str) -> str:
    """Extensión normalizada (sin punto) validada contra la allowlist."""
    suffix = PurePath(filename or "").suffix.lower().lstrip(".")
    extension = suffix or _EXTENSION_BY_MEDIA_TYPE.get(media_type, "")
    if extension not in ALLOWED_EXTENSIONS:
        raise UnsupportedExtensionError(extension, ALLOWED_EXTENSIONS)
    return extension


def build_stored_filename(owner_id: int, extension: str) -> str:
    return f"user_{int(owner_id)}_{uuid4().hex}.{extension}"


class LocalAvatarStorage:
    """
    Storage de avatars sobre un directorio local.

    Modelo mental (una transferencia):
      validar -> abrir destino -> (leer chunk, contar, escribir)* -> cerrar
      cualquier salida sin "cerrar" => borrar destino
    """

    def __init__(
        self,
        root_dir: str | Path,
        *,
        public_prefix: str,
        max_bytes: int,
    ) -> None:
        if max_bytes <= 0:
            raise ValueError("max_bytes must be greater than 0")
        self._root = Path(root_dir)
        self._public_prefix = "/" + public_prefix.strip("/")
        self._max_bytes = max_bytes

    @property
    def root_dir(self) -> Path:
        return self._root

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    def ensure_root(self) -> None:
        self._root.mkdir(parents=True, exist_ok=True)

    def is_writable(self) -> bool:
        return self._root.is_dir() and os.access(self._root, os.W_OK)

    def public_url_for(self, stored_filename: str) -> str:
        return f"{self._public_prefix}/{stored_filename}"

    # ------------------------------------------------------------------
    # StoreUpload
    # ------------------------------------------------------------------
    async def store_upload(
        self,
        source: AsyncIterator[bytes],
        *,
        media_type: str | None,
        filename: str | None,
        owner_id: int,
    ) -> StoredFile:
        """
        Persiste el stream como avatar de `owner_id`.

        Raises:
            UnsupportedMediaTypeError / UnsupportedExtensionError: antes de leer.
            PayloadTooLargeError: el contador superó max_bytes.
            UploadAbortedError: el stream de origen falló a mitad de camino.
            StorageError: falla de escritura en disco.
        """
        normalized_type = (media_type or "").split(";", 1)[0].strip().lower()
        if not normalized_type.startswith("image/"):
            raise UnsupportedMediaTypeError(media_type)
        extension = resolve_extension(filename, normalized_type)

        stored_filename = build_stored_filename(owner_id, extension)
        destination = self._root / stored_filename

        opened = completed = False
        written = 0
        try:
            await run_in_threadpool(self.ensure_root)
            async with aiofiles.open(destination, "xb") as out:
                opened = True
                chunks = source.__aiter__()
                while True:
                    chunk = await self._next_chunk(chunks)
                    if chunk is None:
                        break
                    written += len(chunk)
                    if written > self._max_bytes:
                        raise PayloadTooLargeError(self._max_bytes)
                    await out.write(chunk)
            completed = True
        except OSError as exc:
            logger.error(
                "Falla de disco en el upload",
                extra={"stored_filename": stored_filename, "error": str(exc)},
            )
            raise StorageError(original_error=exc) from exc
        finally:
            # R: Solo se borra lo que este upload creó (modo "x").
            if opened and not completed:
                await self._discard(destination)

        logger.info(
            "Avatar almacenado",
            extra={
                "owner_id": owner_id,
                "stored_filename": stored_filename,
                "size_bytes": written,
            },
        )
        return StoredFile(
            stored_path=destination,
            stored_filename=stored_filename,
            public_url=self.public_url_for(stored_filename),
        )

    @staticmethod
    async def _next_chunk(chunks: AsyncIterator[bytes]) -> bytes | None:
        """Siguiente chunk no vacío; None al terminar el stream."""
        while True:
            try:
                chunk = await chunks.__anext__()
            except StopAsyncIteration:
                return None
            except AppError:
                raise
            except Exception as exc:
                logger.warning(
                    "Stream de upload abortado",
                    extra={"error": type(exc).__name__},
                )
                raise UploadAbortedError(original_error=exc) from exc
            if chunk:
                return bytes(chunk)

    async def _discard(self, path: Path) -> None:
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return
        except OSError as exc:
            logger.error(
                "No se pudo borrar el upload parcial",
                extra={"stored_filename": path.name, "error": str(exc)},
            )

    # ------------------------------------------------------------------
    # Borrado best-effort
    # ------------------------------------------------------------------
    async def delete_by_url(self, public_url: str | None, *, owner_id: int) -> bool:
        """
        Borra un avatar previo a partir de su URL pública.

        Solo actúa sobre nombres generados por este storage para `owner_id`
        dentro del root; cualquier otra URL se ignora. Nunca levanta excepción.
        """
        prefix = self._public_prefix + "/"
        if not public_url or not public_url.startswith(prefix):
            return False
        name = public_url[len(prefix) :]
        if not _STORED_NAME_RE.match(name) or not name.startswith(f"user_{int(owner_id)}_"):
            return False
        try:
            await aiofiles.os.remove(self._root / name)
            return True
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.warning(
                "No se pudo borrar el avatar previo",
                extra={"stored_filename": name, "error": str(exc)},
            )
            return False
