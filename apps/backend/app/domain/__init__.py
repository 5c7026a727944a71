"""
===============================================================================
TARJETA CRC — domain/__init__.py
===============================================================================

Módulo:
    Exportaciones de la Capa de Dominio (API pública del dominio)

Responsabilidades:
    - Centralizar exports para imports limpios en application/api.
    - Evitar imports profundos y acoplamientos innecesarios.

Colaboradores:
    - domain.entities: Post, Category, Tag, PostTag
    - domain.repositories: Puerto de persistencia de usuarios

Reglas:
    - Solo re-exporta contratos/entidades del dominio.
    - No importar infraestructura aquí.
===============================================================================
"""

from .entities import Category, Post, PostStatus, PostTag, Tag
from .repositories import UserRepository

__all__ = [
    "Category",
    "Post",
    "PostStatus",
    "PostTag",
    "Tag",
    "UserRepository",
]
