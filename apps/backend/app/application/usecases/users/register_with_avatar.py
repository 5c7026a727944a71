"""
===============================================================================
USE CASE: Register With Avatar
===============================================================================

Business Goal:
    Registro público que opcionalmente trae un archivo de avatar.

Orden (sin ids provisorios):
    1) Crear el registro (RegisterUserUseCase) => id real.
    2) Si hay archivo: UploadAvatarUseCase con la identidad recién creada
       (owner == actor, la política owner-or-admin pasa).
    3) Si el upload falla (tipo, tamaño, abort, storage) el registro se
       elimina y el error original se propaga: el alta es todo-o-nada.
===============================================================================
"""

from __future__ import annotations

from starlette.concurrency import run_in_threadpool

from ....crosscutting.logger import logger
from ....domain.repositories import UserRepository
from ....identity.users import User
from .register_user import NewAccountInput, RegisterUserUseCase
from .upload_avatar import AvatarUpload, UploadAvatarUseCase


class RegisterWithAvatarUseCase:
    def __init__(
        self,
        register: RegisterUserUseCase,
        upload_avatar: UploadAvatarUseCase,
        repository: UserRepository,
    ) -> None:
        self._register = register
        self._upload_avatar = upload_avatar
        self._users = repository

    async def execute(
        self, input_data: NewAccountInput, avatar: AvatarUpload | None = None
    ) -> User:
        user = await run_in_threadpool(self._register.execute, input_data)
        if avatar is None:
            return user

        try:
            result = await self._upload_avatar.execute(
                user.to_identity(), user.id, avatar
            )
        except BaseException:
            logger.warning(
                "Registro revertido: falló el upload del avatar",
                extra={"user_id": user.id},
            )
            await run_in_threadpool(self._users.delete_user, user.id)
            raise
        return result.user
