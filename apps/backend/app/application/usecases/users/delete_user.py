"""
===============================================================================
USE CASE: Delete User
===============================================================================

Elimina un registro (solo admin; la política se aplica en la ruta con
require_admin). El avatar almacenado se borra best-effort después.
===============================================================================
"""

from __future__ import annotations

from ....crosscutting.exceptions import NotFoundError
from ....crosscutting.logger import logger
from ....domain.repositories import UserRepository
from ....identity.users import User

USER_DELETED_MESSAGE = "Usuario eliminado correctamente."


class DeleteUserUseCase:
    def __init__(self, repository: UserRepository) -> None:
        self._users = repository

    def execute(self, user_id: int) -> User:
        """Devuelve el registro borrado (el caller puede limpiar su avatar)."""
        existing = self._users.get_user_by_id(user_id)
        if existing is None or not self._users.delete_user(user_id):
            raise NotFoundError("Usuario", user_id)
        logger.info("Usuario eliminado", extra={"user_id": user_id})
        return existing
