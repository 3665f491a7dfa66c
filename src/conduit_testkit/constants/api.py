"""Conduit API endpoint paths and client defaults.

Paths are relative to the configured API base URL (which ends with "/").
"""

from typing import Final

# Client defaults
DEFAULT_TIMEOUT_SECONDS: Final[float] = 30.0
MAX_RETRIES: Final[int] = 3
AUTH_SCHEME: Final[str] = "Token"

# Users
USERS_LOGIN: Final[str] = "api/users/login"
USERS_REGISTER: Final[str] = "api/users"

# Articles
ARTICLES: Final[str] = "api/articles"


def article_path(slug: str) -> str:
    return f"{ARTICLES}/{slug}"


def comments_path(slug: str) -> str:
    return f"{ARTICLES}/{slug}/comments"


def comment_path(slug: str, comment_id: int | str) -> str:
    return f"{ARTICLES}/{slug}/comments/{comment_id}"
