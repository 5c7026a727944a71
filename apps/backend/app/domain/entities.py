"""
===============================================================================
TARJETA CRC — domain/entities.py
===============================================================================

Módulo:
    Entidades del Dominio de contenido (Post, Category, Tag)

Responsabilidades:
    - Definir las estructuras del modelo de contenido tipo blog.
    - Reflejar 1:1 las tablas de `infrastructure/db/schema.sql`.

Colaboradores:
    - infrastructure/db/schema.sql: DDL de posts/categories/tags/post_tags.
    - identity.users.User: autor de un Post (author_id).

Principios:
    - Sin dependencias a DB/FastAPI.
    - Solo datos: este modelo no tiene casos de uso ni endpoints.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class PostStatus(str, Enum):
    """Estado editorial de un Post (valor = formato en la DB)."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"


@dataclass
class Category:
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Tag:
    id: int
    name: str
    slug: str
    created_at: Optional[datetime] = None


@dataclass
class Post:
    """
    Post del blog.

    Importante:
      - author_id referencia users.id.
      - tag_ids se persiste vía la tabla puente post_tags.
    """

    id: int
    title: str
    slug: str
    content: str
    author_id: int
    category_id: Optional[int] = None
    excerpt: Optional[str] = None
    cover_image: Optional[str] = None
    status: PostStatus = PostStatus.DRAFT
    tag_ids: List[int] = field(default_factory=list)
    published_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_published(self) -> bool:
        return self.status == PostStatus.PUBLISHED


@dataclass(frozen=True)
class PostTag:
    """Fila de la tabla puente post_tags."""

    post_id: int
    tag_id: int
