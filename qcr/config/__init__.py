"""Configuration document: schema, validation, discovery and persistence."""

from .schema import ModelEntry, ProviderEnv, Provider, ConfigEntry, Config, DefaultConfig, ConfigFile

__all__ = ["ModelEntry", "ProviderEnv", "Provider", "ConfigEntry", "Config", "DefaultConfig", "ConfigFile"]
