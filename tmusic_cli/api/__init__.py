"""
Catalog API Layer.

This package handles all communication with the YouTube Music catalog.
"""

from .client import CatalogClient, check_connectivity

__all__ = ["CatalogClient", "check_connectivity"]
