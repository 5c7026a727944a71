"""
===============================================================================
USER USE CASES PACKAGE (Public API / Exports)
===============================================================================

Punto único de importación para los casos de uso de usuarios, sus DTOs y
resultados.
===============================================================================
"""

from __future__ import annotations

from .delete_user import USER_DELETED_MESSAGE, DeleteUserUseCase
from .get_user import GetUserUseCase, ListUsersUseCase
from .login_user import AuthResult, LoginInput, LoginUseCase, issue_auth_result
from .register_user import CreateUserUseCase, NewAccountInput, RegisterUserUseCase
from .register_with_avatar import RegisterWithAvatarUseCase
from .update_user import UpdateUserInput, UpdateUserUseCase
from .upload_avatar import AvatarResult, AvatarUpload, UploadAvatarUseCase

__all__ = [
    # Alta / auth
    "NewAccountInput",
    "RegisterUserUseCase",
    "CreateUserUseCase",
    "RegisterWithAvatarUseCase",
    "LoginInput",
    "LoginUseCase",
    "AuthResult",
    "issue_auth_result",
    # Gestión
    "GetUserUseCase",
    "ListUsersUseCase",
    "UpdateUserInput",
    "UpdateUserUseCase",
    "DeleteUserUseCase",
    "USER_DELETED_MESSAGE",
    # Avatar
    "AvatarUpload",
    "AvatarResult",
    "UploadAvatarUseCase",
]
