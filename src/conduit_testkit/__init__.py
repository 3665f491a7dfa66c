"""conduit-testkit: test automation support for the Conduit blogging app."""

__version__ = "0.1.0"
