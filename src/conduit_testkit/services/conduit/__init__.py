"""Conduit API client."""

from conduit_testkit.services.conduit.client import ConduitClient

__all__ = ["ConduitClient"]
