"""Resource lifecycle tracking and capability composition."""

from conduit_testkit.core.composer import (
    CapabilityProvider,
    Composition,
    InvocationState,
    ProviderContext,
    Resolution,
    compose,
    merge_providers,
    provider,
)
from conduit_testkit.core.tracker import (
    ResourceDeleter,
    ResourceKind,
    ResourceTracker,
    TrackedResource,
    comment_identifier,
)

__all__ = [
    "CapabilityProvider",
    "Composition",
    "InvocationState",
    "ProviderContext",
    "Resolution",
    "ResourceDeleter",
    "ResourceKind",
    "ResourceTracker",
    "TrackedResource",
    "comment_identifier",
    "compose",
    "merge_providers",
    "provider",
]
