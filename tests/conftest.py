"""Shared pytest fixtures for conduit-testkit tests.

This module provides fixtures for:
- Explicit Settings instances (no .env files involved)
- A recording ResourceDeleter for tracker tests
- Canned Conduit API JSON bodies
- Test data factories

Usage:
    @pytest.mark.unit
    async def test_something(recording_deleter):
        tracker = ResourceTracker(recording_deleter)
"""

import os
from collections.abc import Callable, Generator
from typing import Any

import pytest

from conduit_testkit.config.settings import Settings, get_settings
from conduit_testkit.core.exceptions import ExternalServiceError
from conduit_testkit.core.tracker import ResourceKind
from conduit_testkit.testing.factories import ArticleFactory, CommentFactory, UserFactory

API_URL = "https://conduit.test/"

# =============================================================================
# Environment Configuration
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment() -> Generator[None, None, None]:
    """Pin the environment name and restore os.environ afterwards."""
    original_env = os.environ.copy()

    os.environ.setdefault("ENVIRONMENT", "test")
    get_settings.cache_clear()

    yield

    os.environ.clear()
    os.environ.update(original_env)
    get_settings.cache_clear()


@pytest.fixture
def api_url() -> str:
    return API_URL


@pytest.fixture
def settings() -> Settings:
    """Settings pointing at a fake API with a pre-issued token."""
    return Settings(
        _env_file=None,  # type: ignore[call-arg]
        api_url=API_URL,
        access_token="test-token",  # type: ignore[arg-type]
        email=None,
        password=None,
        max_retries=1,
    )


# =============================================================================
# Resource Deleter Double
# =============================================================================


class RecordingDeleter:
    """ResourceDeleter that records calls and fails for chosen identifiers."""

    def __init__(self) -> None:
        self.calls: list[tuple[ResourceKind, str]] = []
        self.fail_on: set[str] = set()

    async def delete_resource(self, kind: ResourceKind, identifier: str) -> None:
        self.calls.append((kind, identifier))
        if identifier in self.fail_on:
            raise ExternalServiceError(service="conduit", message=f"cannot delete {identifier}")

    @property
    def identifiers(self) -> list[str]:
        return [identifier for _, identifier in self.calls]


@pytest.fixture
def recording_deleter() -> RecordingDeleter:
    return RecordingDeleter()


# =============================================================================
# Canned API Bodies
# =============================================================================


@pytest.fixture
def make_article_json() -> Callable[..., dict[str, Any]]:
    """Build an article as the Conduit API returns it."""

    def _make(slug: str = "how-to-train-your-dragon", **overrides: Any) -> dict[str, Any]:
        article = {
            "slug": slug,
            "title": "How to train your dragon",
            "description": "Ever wonder how?",
            "body": "It takes a Jacobian",
            "tagList": ["dragons", "training"],
            "createdAt": "2016-02-18T03:22:56.637Z",
            "updatedAt": "2016-02-18T03:48:35.824Z",
            "favorited": False,
            "favoritesCount": 0,
            "author": {
                "username": "jake",
                "bio": "I work at statefarm",
                "image": "https://i.stack.imgur.com/xHWG8.jpg",
                "following": False,
            },
        }
        article.update(overrides)
        return article

    return _make


@pytest.fixture
def user_json() -> dict[str, Any]:
    return {
        "email": "jake@jake.jake",
        "token": "jwt.token.here",
        "username": "jake",
        "bio": "I work at statefarm",
        "image": None,
    }


# =============================================================================
# Factory Fixtures
# =============================================================================


@pytest.fixture
def article_factory() -> type[ArticleFactory]:
    """Provide article factory for creating article drafts."""
    return ArticleFactory


@pytest.fixture
def comment_factory() -> type[CommentFactory]:
    """Provide comment factory for creating comment drafts."""
    return CommentFactory


@pytest.fixture
def user_factory() -> type[UserFactory]:
    """Provide user factory for creating registrations."""
    return UserFactory


# =============================================================================
# Markers for Test Selection
# =============================================================================

# Usage:
# pytest -m unit          # Run only unit tests
# pytest -m integration   # Run only tests against a live API
# pytest -m "not slow"    # Skip slow tests
