"""Catalog of providers known without declaration in the configuration document."""

from .registry import BuiltInProvider, BUILT_IN_PROVIDERS, get_built_in_provider, get_built_in_provider_names

__all__ = ["BuiltInProvider", "BUILT_IN_PROVIDERS", "get_built_in_provider", "get_built_in_provider_names"]
