"""Pydantic models for Conduit API payloads and responses."""

from conduit_testkit.models.article import Article, ArticleDraft, Comment, CommentDraft, Profile
from conduit_testkit.models.user import AuthenticatedUser, UserCredentials, UserRegistration

__all__ = [
    "Article",
    "ArticleDraft",
    "AuthenticatedUser",
    "Comment",
    "CommentDraft",
    "Profile",
    "UserCredentials",
    "UserRegistration",
]
