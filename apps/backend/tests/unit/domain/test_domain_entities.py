"""
Name: Content Entities Unit Tests

Responsibilities:
  - Default values of Post/Category/Tag
  - PostStatus values match the post_status enum in schema.sql
  - PostTag link rows are immutable

Collaborators:
  - app.domain.entities
  - app.infrastructure.db.schema.load_schema_sql
"""

from dataclasses import FrozenInstanceError

import pytest
from app.domain import Category, Post, PostStatus, PostTag, Tag
from app.infrastructure.db.schema import load_schema_sql

pytestmark = pytest.mark.unit


def _post(**overrides) -> Post:
    values = dict(id=1, title="Hola", slug="hola", content="...", author_id=7)
    values.update(overrides)
    return Post(**values)


class TestPost:
    def test_new_post_is_draft_without_tags(self):
        post = _post()

        assert post.status is PostStatus.DRAFT
        assert not post.is_published
        assert post.tag_ids == []
        assert post.category_id is None

    def test_published_post(self):
        assert _post(status=PostStatus.PUBLISHED).is_published

    def test_tag_lists_are_not_shared(self):
        first, second = _post(), _post(id=2)
        first.tag_ids.append(3)

        assert second.tag_ids == []


def test_category_and_tag_optional_fields():
    category = Category(id=1, name="Noticias", slug="noticias")
    tag = Tag(id=1, name="python", slug="python")

    assert category.description is None
    assert tag.created_at is None


def test_post_tag_is_frozen():
    link = PostTag(post_id=1, tag_id=2)

    with pytest.raises(FrozenInstanceError):
        link.tag_id = 3


def test_status_values_match_schema_enum():
    sql = load_schema_sql()

    for status in PostStatus:
        assert f"'{status.value}'" in sql
