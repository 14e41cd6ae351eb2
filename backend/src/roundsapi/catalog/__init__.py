"""Endpoint catalog: declarative endpoint definitions and shared tables."""

from roundsapi.catalog.loader import CATALOG_DIR, EndpointCatalog, EndpointDefinition

__all__ = ["CATALOG_DIR", "EndpointCatalog", "EndpointDefinition"]
