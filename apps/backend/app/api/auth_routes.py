"""
===============================================================================
TARJETA CRC — app/api/auth_routes.py (Registro y Login)
===============================================================================

Responsabilidades:
  - POST /api/auth/register: alta pública (JSON o multipart con avatar).
  - POST /api/auth/login: credenciales -> {token, user}.

Patrones aplicados:
  - Adapter / Presentation Layer: traduce HTTP <-> casos de uso.
  - Fail-safe security: la respuesta de login no distingue la causa del 401.

Colaboradores:
  - application.usecases.users: RegisterWithAvatarUseCase, LoginUseCase
  - api.schemas: DTOs
  - infrastructure.storage.iter_chunks: UploadFile -> stream de chunks
===============================================================================
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from ..application.usecases.users import (
    AuthResult,
    AvatarUpload,
    LoginInput,
    LoginUseCase,
    NewAccountInput,
    RegisterWithAvatarUseCase,
    issue_auth_result,
)
from ..container import get_login_use_case, get_register_with_avatar_use_case
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from ..crosscutting.exceptions import ValidationError
from ..infrastructure.storage import iter_chunks
from .schemas import AuthResponse, LoginRequest, RegisterRequest, UserResponse

router = APIRouter(prefix="/api/auth", tags=["auth"], responses=OPENAPI_ERROR_RESPONSES)

_FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")

_REGISTER_FIELDS = {
    "type": "object",
    "required": ["name", "email", "password", "confirmPassword"],
    "properties": {
        "name": {"type": "string", "minLength": 2},
        "email": {"type": "string", "format": "email"},
        "password": {"type": "string", "minLength": 6},
        "confirmPassword": {"type": "string", "minLength": 6},
    },
}

# R: El body se parsea a mano (JSON o multipart), así que el schema se declara acá.
_REGISTER_OPENAPI = {
    "requestBody": {
        "required": True,
        "content": {
            "application/json": {
                "schema": {
                    **_REGISTER_FIELDS,
                    "properties": {
                        **_REGISTER_FIELDS["properties"],
                        "avatar": {"type": "string", "nullable": True},
                    },
                }
            },
            "multipart/form-data": {
                "schema": {
                    **_REGISTER_FIELDS,
                    "properties": {
                        **_REGISTER_FIELDS["properties"],
                        "avatar": {"type": "string", "format": "binary"},
                    },
                }
            },
        },
    }
}


def _to_auth_response(result: AuthResult) -> AuthResponse:
    return AuthResponse(
        token=result.token,
        expires_in=result.expires_in,
        user=UserResponse.from_user(result.user),
    )


def _parse_register(data: dict[str, Any]) -> RegisterRequest:
    try:
        return RegisterRequest.model_validate(data)
    except PydanticValidationError as exc:
        # R: Mismo camino que la validación automática de FastAPI (400 por campo).
        raise RequestValidationError(
            [{**err, "loc": ("body", *err["loc"])} for err in exc.errors()]
        ) from exc


def _avatar_from_part(part: Any) -> AvatarUpload | None:
    # R: Un input file vacío llega como parte sin filename: equivale a "sin avatar".
    if not isinstance(part, UploadFile) or not part.filename:
        return None
    return AvatarUpload(
        source=iter_chunks(part),
        media_type=part.content_type,
        filename=part.filename,
    )


async def _read_json_body(request: Request) -> dict[str, Any]:
    try:
        data = await request.json()
    except ValueError as exc:
        raise ValidationError.for_field("body", "JSON inválido.") from exc
    if not isinstance(data, dict):
        raise ValidationError.for_field("body", "Se esperaba un objeto JSON.")
    return data


@router.post(
    "/register",
    status_code=201,
    response_model=AuthResponse,
    openapi_extra=_REGISTER_OPENAPI,
)
async def register(
    request: Request,
    use_case: RegisterWithAvatarUseCase = Depends(get_register_with_avatar_use_case),
):
    """
    Registra un usuario (rol USER siempre) y devuelve token.

    - JSON: `avatar` opcional como URL.
    - multipart/form-data: `avatar` opcional como archivo de imagen.
    """
    content_type = request.headers.get("content-type", "")

    if content_type.startswith(_FORM_CONTENT_TYPES):
        async with request.form() as form:
            fields = {k: v for k, v in form.items() if not isinstance(v, UploadFile)}
            payload = _parse_register(fields)
            avatar = _avatar_from_part(form.get("avatar"))
            user = await use_case.execute(_to_input(payload), avatar)
    else:
        payload = _parse_register(await _read_json_body(request))
        user = await use_case.execute(_to_input(payload))

    result = await run_in_threadpool(issue_auth_result, user)
    return _to_auth_response(result)


def _to_input(payload: RegisterRequest) -> NewAccountInput:
    return NewAccountInput(
        email=payload.email,
        password=payload.password,
        confirm_password=payload.confirm_password,
        name=payload.name,
        role=payload.role,
        avatar=payload.avatar,
    )


@router.post("/login", response_model=AuthResponse)
def login(
    req: LoginRequest,
    use_case: LoginUseCase = Depends(get_login_use_case),
):
    """Inicia sesión y devuelve JWT (401 genérico si falla)."""
    result = use_case.execute(LoginInput(email=req.email, password=req.password))
    return _to_auth_response(result)
