"""HTTP collaborators for the application under test."""

from conduit_testkit.services.base import ApiResponse, BaseAPIClient
from conduit_testkit.services.conduit import ConduitClient

__all__ = ["ApiResponse", "BaseAPIClient", "ConduitClient"]
