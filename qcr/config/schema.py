"""Typed shape of the configuration document.

The models are deliberately permissive: structural rules (non-empty strings,
URL syntax, cross references, uniqueness) live in ``qcr.config.validation`` so
that a single pass can report every defect. Case-folded lookup indices are
built once at construction; treat instances as read-only apart from
``default_config``.
"""

from pydantic import BaseModel, Field, PrivateAttr, field_validator
from typing import Any, Dict, List, Optional


class ModelEntry(BaseModel):
    model: str


class ProviderEnv(BaseModel):
    api_key: str = ""
    base_url: str = ""
    models: List[ModelEntry] = Field(default_factory=list)


class Provider(BaseModel):
    provider: str = Field(description="Provider name, unique within a document")
    env: ProviderEnv = Field(default_factory=ProviderEnv)

    _models_by_key: Dict[str, str] = PrivateAttr(default_factory=dict)

    def model_post_init(self, context: Any) -> None:
        for entry in self.env.models:
            self._models_by_key.setdefault(entry.model.casefold(), entry.model)

    @property
    def model_names(self) -> List[str]:
        return [m.model for m in self.env.models]

    def has_model(self, model: str) -> bool:
        """Exact membership test."""
        return any(m.model == model for m in self.env.models)

    def find_model(self, model: str) -> Optional[str]:
        """Case-insensitive lookup returning the model in its declared case."""
        return self._models_by_key.get(model.casefold())


class ConfigEntry(BaseModel):
    name: str
    provider: str
    model: str


class Config(BaseModel):
    config_name: Optional[str] = None
    config: List[ConfigEntry] = Field(default_factory=list)


class DefaultConfig(BaseModel):
    name: str


class ConfigFile(BaseModel):
    default_config: Optional[List[DefaultConfig]] = None
    configs: List[Config] = Field(default_factory=list)
    providers: List[Provider] = Field(default_factory=list)

    @field_validator("default_config", mode="before")
    @classmethod
    def drop_unusable_defaults(cls, value: Any) -> Any:
        # only the first entry is authoritative; malformed extras are a validator warning
        if not isinstance(value, list) or not value:
            return value
        extras = [d for d in value[1:] if isinstance(d, dict) and isinstance(d.get("name"), str)]
        return value[:1] + extras

    _entries_by_name: Dict[str, ConfigEntry] = PrivateAttr(default_factory=dict)
    _providers_by_name: Dict[str, Provider] = PrivateAttr(default_factory=dict)
    _providers_by_key: Dict[str, Provider] = PrivateAttr(default_factory=dict)

    def model_post_init(self, context: Any) -> None:
        # first occurrence wins; duplicates are reported by the validator
        for group in self.configs:
            for entry in group.config:
                self._entries_by_name.setdefault(entry.name, entry)
        for provider in self.providers:
            self._providers_by_name.setdefault(provider.provider, provider)
            self._providers_by_key.setdefault(provider.provider.casefold(), provider)

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "ConfigFile":
        return cls.model_validate(data)

    def to_document(self) -> Dict[str, Any]:
        """Plain mapping mirroring the on-disk layout."""
        return self.model_dump(exclude_none=True)

    def entries(self) -> List[ConfigEntry]:
        return [entry for group in self.configs for entry in group.config]

    def find_entry(self, name: str) -> Optional[ConfigEntry]:
        return self._entries_by_name.get(name)

    def find_provider(self, name: str, exact: bool = True) -> Optional[Provider]:
        if exact:
            return self._providers_by_name.get(name)
        return self._providers_by_name.get(name) or self._providers_by_key.get(name.casefold())

    @property
    def default_name(self) -> Optional[str]:
        if not self.default_config:
            return None
        return self.default_config[0].name
