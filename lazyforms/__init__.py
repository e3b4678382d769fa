"""Context resolution service for the Lazy Forms browser extension."""

__version__ = "1.0.0"
