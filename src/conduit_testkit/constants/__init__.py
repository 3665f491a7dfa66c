"""Conduit API endpoints and validation test data."""
