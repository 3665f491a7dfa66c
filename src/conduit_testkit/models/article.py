"""Article and comment models.

Conduit uses camelCase JSON keys; models accept both the alias and the
field name, and dump with aliases for request payloads.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class Profile(BaseModel):
    """Public author profile embedded in articles and comments."""

    username: str
    bio: str | None = None
    image: str | None = None
    following: bool = False


class ArticleDraft(BaseModel):
    """Fields sent when creating or updating an article."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: str
    body: str
    tag_list: list[str] = Field(default_factory=list, alias="tagList")


class Article(ArticleDraft):
    """Article as returned by the API."""

    slug: str
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    favorited: bool = False
    favorites_count: int = Field(default=0, alias="favoritesCount")
    author: Profile | None = None


class CommentDraft(BaseModel):
    """Fields sent when adding a comment."""

    body: str


class Comment(CommentDraft):
    """Comment as returned by the API."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    author: Profile | None = None
