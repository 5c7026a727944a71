"""
===============================================================================
USE CASES: Get User / List Users
===============================================================================

Lectura de registros. "No existe" es NotFoundError (404) en GetUser.
===============================================================================
"""

from __future__ import annotations

from ....crosscutting.exceptions import NotFoundError
from ....domain.repositories import UserRepository
from ....identity.users import User

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 200


class GetUserUseCase:
    def __init__(self, repository: UserRepository) -> None:
        self._users = repository

    def execute(self, user_id: int) -> User:
        user = self._users.get_user_by_id(user_id)
        if user is None:
            raise NotFoundError("Usuario", user_id)
        return user


class ListUsersUseCase:
    def __init__(self, repository: UserRepository) -> None:
        self._users = repository

    def execute(self, *, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> list[User]:
        # R: Clamp del tamaño de página; el repo ya trata limit<=0 y offset<0.
        return self._users.list_users(limit=min(limit, MAX_PAGE_SIZE), offset=offset)
