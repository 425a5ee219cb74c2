"""Built-in provider registry.

A compiled-in, read-only table. Keys are stored lowercase and model lookups
go through a case-folded index built at import time, so callers get models
back in their canonical case regardless of how they typed them.
"""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from ..util.const import EnvVar


@dataclass(frozen=True)
class BuiltInProvider:
    key: str
    display_name: str
    base_url_template: str
    models: Tuple[str, ...]
    _models_by_key: Dict[str, str] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        for model in self.models:
            self._models_by_key.setdefault(model.casefold(), model)

    @property
    def api_key_env(self) -> str:
        return f"{self.key.upper()}_API_KEY"

    def find_model(self, model: str) -> Optional[str]:
        return self._models_by_key.get(model.casefold())

    def base_url(self, model: str, environ: Optional[Mapping[str, str]] = None) -> str:
        """Concrete endpoint for `model`; static unless the template has a resource slot."""
        if "{resource}" not in self.base_url_template:
            return self.base_url_template
        environ = os.environ if environ is None else environ
        resource = (environ.get("AZURE_RESOURCE_NAME") or "").strip()
        if not resource:
            resource = model.lower().replace("_", "-")
        return self.base_url_template.format(resource=resource)

    def api_key(self, environ: Optional[Mapping[str, str]] = None) -> Optional[str]:
        """Provider-specific key first, then the generic OPENAI_API_KEY."""
        environ = os.environ if environ is None else environ
        for var in (self.api_key_env, EnvVar.API_KEY.value):
            value = environ.get(var)
            if value and value.strip():
                return value
        return None


def _provider(key: str, display_name: str, base_url_template: str, models: List[str]) -> BuiltInProvider:
    return BuiltInProvider(key=key, display_name=display_name,
                           base_url_template=base_url_template, models=tuple(models))


BUILT_IN_PROVIDERS: Dict[str, BuiltInProvider] = {
    p.key: p for p in (
        _provider("openai", "OpenAI", "https://api.openai.com/v1", [
            "gpt-4", "gpt-4-turbo", "gpt-4-turbo-preview", "gpt-4-0125-preview", "gpt-4-1106-preview",
            "gpt-3.5-turbo", "gpt-3.5-turbo-0125", "gpt-3.5-turbo-1106", "gpt-3.5-turbo-16k",
        ]),
        _provider("azure", "Azure OpenAI", "https://{resource}.openai.azure.com/openai", [
            "gpt-4", "gpt-4-turbo", "gpt-4-32k", "gpt-35-turbo", "gpt-35-turbo-16k",
        ]),
        _provider("anthropic", "Anthropic", "https://api.anthropic.com/v1", [
            "claude-3-opus", "claude-3-sonnet", "claude-3-haiku",
            "claude-3-opus-20240229", "claude-3-sonnet-20240229", "claude-3-haiku-20240307",
            "claude-2.1", "claude-2.0", "claude-instant-1.2",
        ]),
        _provider("google", "Google AI", "https://generativelanguage.googleapis.com/v1", [
            "gemini-pro", "gemini-pro-vision", "gemini-1.5-pro", "gemini-1.5-flash",
        ]),
    )
}


def get_built_in_provider(name: str) -> Optional[BuiltInProvider]:
    return BUILT_IN_PROVIDERS.get(name.lower())


def get_built_in_provider_names() -> List[str]:
    return list(BUILT_IN_PROVIDERS)
