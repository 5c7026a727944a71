"""
===============================================================================
USE CASE: Upload Avatar
===============================================================================

Business Goal:
    Guardar la imagen de avatar de un usuario EXISTENTE y asociar su URL
    pública al registro.

Flujo:
    1) owner-or-admin sobre el registro (403).
    2) El registro debe existir ANTES de leer bytes (404). El id real es el
       que va en el nombre del archivo; nunca se usa un id provisorio.
    3) StoreUpload (streaming con límite y limpieza ante error).
    4) Persistir la URL. Si el registro desapareció entre 2 y 4, se borra el
       archivo recién guardado y se responde 404.
    5) Borrar el avatar anterior (best-effort, solo si era de este storage).

-------------------------------------------------------------------------------
CRC CARD
-------------------------------------------------------------------------------
Class:
    UploadAvatarUseCase

Collaborators:
    - UserRepository (sync => run_in_threadpool)
    - LocalAvatarStorage (async)
    - identity.access_control.authorize_owner_or_admin
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncIterator

from starlette.concurrency import run_in_threadpool

from ....crosscutting.exceptions import NotFoundError
from ....crosscutting.logger import logger
from ....domain.repositories import UserRepository
from ....identity.access_control import authorize_owner_or_admin
from ....identity.users import Identity, User
from ....infrastructure.storage import LocalAvatarStorage


@dataclass(frozen=True)
class AvatarUpload:
    """Parte multipart ya abierta, expuesta como stream de chunks."""

    source: AsyncIterator[bytes]
    media_type: str | None
    filename: str | None


@dataclass(frozen=True)
class AvatarResult:
    avatar_url: str
    user: User


class UploadAvatarUseCase:
    def __init__(self, repository: UserRepository, storage: LocalAvatarStorage) -> None:
        self._users = repository
        self._storage = storage

    async def execute(
        self, actor: Identity, user_id: int, upload: AvatarUpload
    ) -> AvatarResult:
        authorize_owner_or_admin(actor, user_id)

        current = await run_in_threadpool(self._users.get_user_by_id, user_id)
        if current is None:
            raise NotFoundError("Usuario", user_id)

        stored = await self._storage.store_upload(
            upload.source,
            media_type=upload.media_type,
            filename=upload.filename,
            owner_id=user_id,
        )

        try:
            updated = await run_in_threadpool(
                lambda: self._users.update_user(user_id, avatar=stored.public_url)
            )
        except BaseException:
            await self._storage.delete_by_url(stored.public_url, owner_id=user_id)
            raise
        if updated is None:
            await self._storage.delete_by_url(stored.public_url, owner_id=user_id)
            raise NotFoundError("Usuario", user_id)

        if current.avatar and current.avatar != stored.public_url:
            await self._storage.delete_by_url(current.avatar, owner_id=user_id)

        logger.info(
            "Avatar actualizado",
            extra={"user_id": user_id, "stored_filename": stored.stored_filename},
        )
        return AvatarResult(avatar_url=stored.public_url, user=updated)
