"""Test-data factories, standard providers and the pytest plugin.

The plugin is not imported here; load it with
``pytest_plugins = ["conduit_testkit.testing.plugin"]``.
"""

from conduit_testkit.testing.factories import (
    ArticleFactory,
    CommentFactory,
    UserFactory,
    article_payload,
    comment_payload,
    updated_article,
    user_payload,
)
from conduit_testkit.testing.providers import (
    API_PROVIDERS,
    CLEANUP_PROVIDERS,
    DEFAULT_COMPOSITION,
)

__all__ = [
    "API_PROVIDERS",
    "CLEANUP_PROVIDERS",
    "DEFAULT_COMPOSITION",
    "ArticleFactory",
    "CommentFactory",
    "UserFactory",
    "article_payload",
    "comment_payload",
    "updated_article",
    "user_payload",
]
