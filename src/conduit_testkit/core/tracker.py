"""Ownership ledger for resources created during a single test.

A ResourceTracker records every entity a test creates at the Conduit API
(articles, comments) and deletes each of them exactly once when the test
finishes, whatever its outcome. Cleanup is best-effort: the resource may
already be gone, or the API may be down, and neither must turn a passing
test red.

Example:
    tracker = ResourceTracker(deleter=client)
    tracker.register(ResourceKind.ARTICLE, article.slug)
    ...
    await tracker.flush()  # at teardown, never raises
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

import structlog

from conduit_testkit.core.exceptions import CleanupFailure

log = structlog.get_logger(__name__)


class ResourceKind(str, Enum):
    """Kinds of API entities a test can own."""

    ARTICLE = "article"
    COMMENT = "comment"


@dataclass(frozen=True)
class TrackedResource:
    """A resource registered for deletion.

    Attributes:
        kind: What the identifier addresses.
        identifier: Slug for articles, ``"<slug>/<comment id>"`` for comments.
    """

    kind: ResourceKind
    identifier: str


def comment_identifier(slug: str, comment_id: int | str) -> str:
    """Build the tracker identifier for a comment on an article."""
    return f"{slug}/{comment_id}"


@runtime_checkable
class ResourceDeleter(Protocol):
    """Collaborator able to delete a resource by kind and identifier."""

    async def delete_resource(self, kind: ResourceKind, identifier: str) -> None: ...


class ResourceTracker:
    """Tracks resources owned by one test invocation and deletes them once.

    Registration is idempotent by identifier. ``flush`` deletes in reverse
    registration order so that dependents (a comment) go before the resource
    they hang off (its article).
    """

    def __init__(self, deleter: ResourceDeleter) -> None:
        self._deleter = deleter
        self._pending: list[TrackedResource] = []

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, identifier: object) -> bool:
        return any(resource.identifier == identifier for resource in self._pending)

    @property
    def pending(self) -> tuple[TrackedResource, ...]:
        """Registered resources in registration order."""
        return tuple(self._pending)

    def register(self, kind: ResourceKind | str, identifier: str) -> None:
        """Register a resource for deletion at teardown.

        Args:
            kind: Resource kind (enum member or its value).
            identifier: Key addressing the resource at the API.
        """
        if identifier in self:
            log.debug("resource_already_tracked", identifier=identifier)
            return
        resource = TrackedResource(kind=ResourceKind(kind), identifier=identifier)
        self._pending.append(resource)
        log.debug("resource_tracked", kind=resource.kind.value, identifier=identifier)

    def unregister(self, identifier: str) -> None:
        """Forget a resource the test already deleted itself."""
        before = len(self._pending)
        self._pending = [r for r in self._pending if r.identifier != identifier]
        if len(self._pending) != before:
            log.debug("resource_untracked", identifier=identifier)

    async def flush(self) -> None:
        """Delete every pending resource, last registered first.

        Failures are logged and swallowed. ``pending`` is empty afterwards
        even if some deletions failed.
        """
        resources = list(reversed(self._pending))
        if not resources:
            return

        log.info("cleanup_started", count=len(resources))
        failed = 0
        try:
            for resource in resources:
                try:
                    await self._deleter.delete_resource(resource.kind, resource.identifier)
                except Exception as e:
                    failed += 1
                    failure = CleanupFailure(resource.kind.value, resource.identifier, e)
                    failure.__cause__ = e
                    log.warning(
                        "cleanup_failed",
                        kind=resource.kind.value,
                        identifier=resource.identifier,
                        exc_info=failure,
                    )
        finally:
            self._pending.clear()

        log.info("cleanup_finished", count=len(resources), failed=failed)
