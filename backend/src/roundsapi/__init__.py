"""roundsapi - catalog-driven contest round data service."""

__version__ = "0.1.0"
