"""
===============================================================================
TARJETA CRC — app/api/user_routes.py (Gestión de Usuarios)
===============================================================================

Responsabilidades:
  - Exponer CRUD de usuarios bajo /api/users.
  - Aplicar la política de acceso en la frontera:
      * listar / obtener por id / crear / borrar -> solo ADMIN
      * perfil propio -> cualquier identidad verificada
      * actualizar / subir avatar -> owner o ADMIN (lo resuelve el caso de uso)
  - Serializar siempre vía UserResponse (nunca password_hash).

Patrones aplicados:
  - Thin Controller: orquesta dependencias, no contiene reglas de negocio.
  - Dependency Injection (FastAPI Depends).

Colaboradores:
  - identity.auth_users: require_identity, require_admin
  - application.usecases.users
  - container: factories
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, Query, UploadFile
from starlette.concurrency import run_in_threadpool

from ..application.usecases.users import (
    USER_DELETED_MESSAGE,
    AvatarUpload,
    CreateUserUseCase,
    DeleteUserUseCase,
    GetUserUseCase,
    ListUsersUseCase,
    NewAccountInput,
    UpdateUserInput,
    UpdateUserUseCase,
    UploadAvatarUseCase,
)
from ..application.usecases.users.get_user import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..container import (
    get_avatar_storage,
    get_create_user_use_case,
    get_delete_user_use_case,
    get_get_user_use_case,
    get_list_users_use_case,
    get_update_user_use_case,
    get_upload_avatar_use_case,
)
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from ..identity.auth_users import require_admin, require_identity
from ..identity.users import Identity
from ..infrastructure.storage import LocalAvatarStorage, iter_chunks
from .schemas import (
    AvatarResponse,
    CreateUserRequest,
    MessageResponse,
    UpdateUserRequest,
    UserResponse,
)

router = APIRouter(prefix="/api/users", tags=["users"], responses=OPENAPI_ERROR_RESPONSES)


@router.get("", response_model=list[UserResponse])
def list_users(
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    _admin: Identity = Depends(require_admin()),
    use_case: ListUsersUseCase = Depends(get_list_users_use_case),
):
    """Lista usuarios (más recientes primero). Solo ADMIN."""
    return [UserResponse.from_user(u) for u in use_case.execute(limit=limit, offset=offset)]


# R: Declarada antes de /{user_id} para que "profile" no se tome como id.
@router.get("/profile", response_model=UserResponse)
def get_profile(
    identity: Identity = Depends(require_identity()),
    use_case: GetUserUseCase = Depends(get_get_user_use_case),
):
    """Perfil del usuario autenticado (registro fresco, no los claims)."""
    return UserResponse.from_user(use_case.execute(identity.id))


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    _admin: Identity = Depends(require_admin()),
    use_case: GetUserUseCase = Depends(get_get_user_use_case),
):
    return UserResponse.from_user(use_case.execute(user_id))


@router.post("", status_code=201, response_model=UserResponse)
def create_user(
    req: CreateUserRequest,
    _admin: Identity = Depends(require_admin()),
    use_case: CreateUserUseCase = Depends(get_create_user_use_case),
):
    """Alta administrativa; respeta el rol pedido (USER por defecto)."""
    user = use_case.execute(
        NewAccountInput(
            email=req.email,
            password=req.password,
            confirm_password=req.confirm_password,
            name=req.name,
            role=req.role,
            avatar=req.avatar,
        )
    )
    return UserResponse.from_user(user)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    req: UpdateUserRequest,
    identity: Identity = Depends(require_identity()),
    use_case: UpdateUserUseCase = Depends(get_update_user_use_case),
):
    """Actualiza name/email/avatar (owner o ADMIN); `role` solo ADMIN."""
    user = use_case.execute(
        identity,
        user_id,
        UpdateUserInput(
            name=req.name,
            email=req.email,
            avatar=req.avatar,
            role=req.role,
        ),
    )
    return UserResponse.from_user(user)


@router.post("/{user_id}/avatar", response_model=AvatarResponse)
async def upload_avatar(
    user_id: int,
    avatar: UploadFile = File(..., description="Imagen (jpg, jpeg, png, gif, webp)"),
    identity: Identity = Depends(require_identity()),
    use_case: UploadAvatarUseCase = Depends(get_upload_avatar_use_case),
):
    """Sube/reemplaza el avatar (owner o ADMIN). Límite de tamaño por streaming."""
    result = await use_case.execute(
        identity,
        user_id,
        AvatarUpload(
            source=iter_chunks(avatar),
            media_type=avatar.content_type,
            filename=avatar.filename,
        ),
    )
    return AvatarResponse(
        avatar_url=result.avatar_url,
        user=UserResponse.from_user(result.user),
    )


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int,
    _admin: Identity = Depends(require_admin()),
    use_case: DeleteUserUseCase = Depends(get_delete_user_use_case),
    storage: LocalAvatarStorage = Depends(get_avatar_storage),
):
    """Borra un usuario (solo ADMIN) y, best-effort, su avatar subido."""
    deleted = await run_in_threadpool(use_case.execute, user_id)
    await storage.delete_by_url(deleted.avatar, owner_id=deleted.id)
    return MessageResponse(message=USER_DELETED_MESSAGE)
