"""
Use Cases Layer (Business Operations)

Structure
---------
usecases/
└── users/      # Registration, login, user management and avatars

Usage
-----
    from app.application.usecases.users import RegisterUserUseCase
    from app.application.usecases import LoginUseCase
"""

from .users import (
    AuthResult,
    AvatarResult,
    AvatarUpload,
    CreateUserUseCase,
    DeleteUserUseCase,
    GetUserUseCase,
    ListUsersUseCase,
    LoginInput,
    LoginUseCase,
    NewAccountInput,
    RegisterUserUseCase,
    RegisterWithAvatarUseCase,
    UpdateUserInput,
    UpdateUserUseCase,
    UploadAvatarUseCase,
)

__all__ = [
    "AuthResult",
    "AvatarResult",
    "AvatarUpload",
    "CreateUserUseCase",
    "DeleteUserUseCase",
    "GetUserUseCase",
    "ListUsersUseCase",
    "LoginInput",
    "LoginUseCase",
    "NewAccountInput",
    "RegisterUserUseCase",
    "RegisterWithAvatarUseCase",
    "UpdateUserInput",
    "UpdateUserUseCase",
    "UploadAvatarUseCase",
]
