"""Conduit API client used for test setup and cleanup.

Covers only what fixtures need: authenticating, creating prerequisite
articles and comments, and deleting them again. Tests exercising the API
itself should use ``send`` and assert on the raw status and body.

Example:
    async with ConduitClient(base_url=settings.api_url) as client:
        await client.login(email, password)
        article = await client.create_article(ArticleFactory())
        await client.delete_article(article.slug)
"""

from http import HTTPStatus
from typing import Any

import structlog

from conduit_testkit.constants.api import (
    ARTICLES,
    USERS_LOGIN,
    USERS_REGISTER,
    article_path,
    comment_path,
    comments_path,
)
from conduit_testkit.core.exceptions import error_for_status
from conduit_testkit.core.tracker import ResourceKind
from conduit_testkit.models.article import Article, ArticleDraft, Comment, CommentDraft
from conduit_testkit.models.user import AuthenticatedUser, UserRegistration
from conduit_testkit.services.base import ApiResponse, BaseAPIClient

log = structlog.get_logger(__name__)


class ConduitClient(BaseAPIClient):
    """Conduit API client.

    Inherits from BaseAPIClient for token handling and transport retries.
    Implements the ResourceDeleter protocol through ``delete_resource``.
    """

    @staticmethod
    def _expect(response: ApiResponse, method: str, path: str, *expected: int) -> Any:
        """Return the body if the status is expected, else raise the matching ApiError."""
        if response.status_code not in expected:
            raise error_for_status(response.status_code, method, path, response.body)
        return response.body

    async def login(self, email: str, password: str) -> AuthenticatedUser:
        """Log in and keep the returned token for later requests.

        Raises:
            ApiError: If the API rejects the credentials.
        """
        response = await self.post(
            USERS_LOGIN,
            body={"user": {"email": email, "password": password}},
            skip_auth=True,
        )
        body = self._expect(response, "POST", USERS_LOGIN, HTTPStatus.OK)
        user = AuthenticatedUser.model_validate(body["user"])
        self.set_token(user.token)
        log.info("user_logged_in", username=user.username)
        return user

    async def register(self, registration: UserRegistration) -> AuthenticatedUser:
        """Register a new user and keep its token."""
        response = await self.post(
            USERS_REGISTER,
            body={"user": registration.model_dump(exclude_none=True)},
            skip_auth=True,
        )
        body = self._expect(
            response, "POST", USERS_REGISTER, HTTPStatus.CREATED, HTTPStatus.OK
        )
        user = AuthenticatedUser.model_validate(body["user"])
        self.set_token(user.token)
        log.info("user_registered", username=user.username)
        return user

    async def create_article(self, draft: ArticleDraft) -> Article:
        """Create an article; returns it with its slug."""
        response = await self.post(
            ARTICLES,
            body={"article": draft.model_dump(by_alias=True)},
        )
        body = self._expect(response, "POST", ARTICLES, HTTPStatus.CREATED)
        article = Article.model_validate(body["article"])
        log.debug("article_created", slug=article.slug)
        return article

    async def get_article(self, slug: str) -> Article | None:
        """Fetch an article, or None if it does not exist."""
        path = article_path(slug)
        response = await self.get(path)
        if response.status_code == HTTPStatus.NOT_FOUND:
            return None
        body = self._expect(response, "GET", path, HTTPStatus.OK)
        return Article.model_validate(body["article"])

    async def update_article(self, slug: str, draft: ArticleDraft) -> Article:
        """Replace an article's fields; the slug may change with the title.

        Example:
            article = await client.update_article(article.slug, updated_article(draft))
        """
        path = article_path(slug)
        response = await self.put(path, body={"article": draft.model_dump(by_alias=True)})
        body = self._expect(response, "PUT", path, HTTPStatus.OK)
        article = Article.model_validate(body["article"])
        log.debug("article_updated", slug=slug, new_slug=article.slug)
        return article

    async def delete_article(self, slug: str) -> None:
        """Delete an article.

        Raises:
            NotFoundError: If the article is already gone.
        """
        path = article_path(slug)
        response = await self.delete(path)
        self._expect(response, "DELETE", path, HTTPStatus.NO_CONTENT, HTTPStatus.OK)
        log.debug("article_deleted", slug=slug)

    async def add_comment(self, slug: str, comment: CommentDraft) -> Comment:
        """Add a comment to an article."""
        path = comments_path(slug)
        response = await self.post(path, body={"comment": comment.model_dump()})
        body = self._expect(response, "POST", path, HTTPStatus.OK, HTTPStatus.CREATED)
        created = Comment.model_validate(body["comment"])
        log.debug("comment_created", slug=slug, comment_id=created.id)
        return created

    async def delete_comment(self, slug: str, comment_id: int | str) -> None:
        """Delete a comment from an article."""
        path = comment_path(slug, comment_id)
        response = await self.delete(path)
        self._expect(response, "DELETE", path, HTTPStatus.NO_CONTENT, HTTPStatus.OK)
        log.debug("comment_deleted", slug=slug, comment_id=comment_id)

    async def delete_resource(self, kind: ResourceKind | str, identifier: str) -> None:
        """Delete a tracked resource (ResourceDeleter protocol).

        Args:
            kind: Resource kind.
            identifier: Article slug, or ``"<slug>/<comment id>"`` for comments.
        """
        kind = ResourceKind(kind)
        if kind is ResourceKind.ARTICLE:
            await self.delete_article(identifier)
        elif kind is ResourceKind.COMMENT:
            slug, _, comment_id = identifier.rpartition("/")
            if not slug:
                raise ValueError(f"Comment identifier must be '<slug>/<id>': {identifier!r}")
            await self.delete_comment(slug, comment_id)
