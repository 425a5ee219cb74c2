"""Configuration resolution.

Turns a configuration name, or a raw provider/model pair, into the concrete
``OPENAI_API_KEY`` / ``OPENAI_BASE_URL`` / ``OPENAI_MODEL`` triple. Resolution
is a pure computation; the result is written to the process environment only
when ``apply`` is true, so validate-only callers pass ``apply=False`` or use
the ``validate_*_resolution`` previews, which never touch the environment.

Resolution is fail-fast: it stops at the first mismatch and reports it with
the names, providers or models the user could have meant.
"""

from dataclasses import dataclass
from typing import List, MutableMapping, Optional

from .config.schema import ConfigEntry, ConfigFile, DefaultConfig, ModelEntry, Provider, ProviderEnv
from .env import EnvironmentVariables, apply_environment_variables
from .providers.registry import BUILT_IN_PROVIDERS, BuiltInProvider, get_built_in_provider, get_built_in_provider_names
from .util.const import DEFAULTS, EnvVar
from .util.logging import log
from .util.types import ValidationResult
from .util.urls import is_valid_url

Environ = Optional[MutableMapping[str, str]]


@dataclass
class ResolutionResult:
    success: bool
    environment_variables: Optional[EnvironmentVariables] = None
    config_entry: Optional[ConfigEntry] = None
    provider: Optional[Provider] = None
    used_built_in_provider: bool = False
    error: Optional[str] = None


def _fail(message: str) -> ResolutionResult:
    log("DEBUG", "resolver", "resolution failed", error=message)
    return ResolutionResult(success=False, error=message)


def _succeed(entry: ConfigEntry, provider: Provider, built_in: bool,
             apply: bool, environ: Environ) -> ResolutionResult:
    env_vars = EnvironmentVariables(
        API_KEY=provider.env.api_key,
        BASE_URL=provider.env.base_url,
        MODEL=entry.model,
    )
    if apply:
        apply_environment_variables(env_vars, environ)
    log("INFO", "resolver", "configuration resolved", name=entry.name, provider=provider.provider,
        model=entry.model, built_in=built_in, applied=apply)
    return ResolutionResult(
        success=True,
        environment_variables=env_vars,
        config_entry=entry,
        provider=provider,
        used_built_in_provider=built_in,
    )


def _joined(items: List[str]) -> str:
    return ", ".join(items) if items else "(none)"


# --- queries -----------------------------------------------------------------

def find_configuration_by_name(config_name: str, config_file: ConfigFile) -> Optional[ConfigEntry]:
    """First entry with this exact name across all groups."""
    return config_file.find_entry(config_name)


def find_provider_by_name(provider_name: str, config_file: ConfigFile) -> Optional[Provider]:
    """Exact match first, then a case-insensitive one."""
    return config_file.find_provider(provider_name, exact=False)


def get_all_configuration_names(config_file: ConfigFile) -> List[str]:
    return [entry.name for entry in config_file.entries()]


def get_all_provider_names(config_file: ConfigFile) -> List[str]:
    return [p.provider for p in config_file.providers]


def get_models_for_provider(provider_name: str, config_file: ConfigFile) -> Optional[List[str]]:
    provider = find_provider_by_name(provider_name, config_file)
    if provider is None:
        return None
    return provider.model_names


def get_models_for_built_in_provider(provider_name: str) -> Optional[List[str]]:
    built_in = get_built_in_provider(provider_name)
    if built_in is None:
        return None
    return list(built_in.models)


def is_built_in_provider(provider_name: str) -> bool:
    return get_built_in_provider(provider_name) is not None


def get_current_default_configuration(config_file: ConfigFile) -> Optional[str]:
    return config_file.default_name


# --- resolution by name ------------------------------------------------------

def resolve_configuration_by_name(config_name: str, config_file: Optional[ConfigFile],
                                  apply: bool = True, environ: Environ = None) -> ResolutionResult:
    if config_file is None:
        return _fail(f'Configuration "{config_name}" not found. No configuration file is loaded.')

    available = _joined(get_all_configuration_names(config_file))

    entry = find_configuration_by_name(config_name, config_file)
    if entry is None:
        return _fail(f'Configuration "{config_name}" not found. Available configurations: {available}')

    provider = config_file.find_provider(entry.provider)
    if provider is None:
        return _fail(
            f'Provider "{entry.provider}" not found for configuration "{config_name}". '
            f"Available providers: {_joined(get_all_provider_names(config_file))}. "
            f"Available configurations: {available}"
        )

    if not provider.has_model(entry.model):
        return _fail(
            f'Model "{entry.model}" is not supported by provider "{provider.provider}". '
            f"Supported models: {_joined(provider.model_names)}. "
            f"Available configurations: {available}"
        )

    return _succeed(entry, provider, False, apply, environ)


def resolve_default_configuration(config_file: ConfigFile, apply: bool = True,
                                  environ: Environ = None) -> ResolutionResult:
    default_name = get_current_default_configuration(config_file)
    if not default_name:
        return _fail('No default configuration is set. Use "qcr set-default <config_name>" to set a default configuration.')
    return resolve_configuration_by_name(default_name, config_file, apply, environ)


def set_default_configuration(config_name: str, config_file: ConfigFile) -> ValidationResult:
    """Point default_config at `config_name`; leaves the document untouched on failure."""
    result = ValidationResult()
    if find_configuration_by_name(config_name, config_file) is None:
        available = _joined(get_all_configuration_names(config_file))
        result.error(f'Configuration "{config_name}" not found. Available configurations: {available}')
        return result

    config_file.default_config = [DefaultConfig(name=config_name)]
    log("INFO", "resolver", "default configuration set", name=config_name)
    return result


# --- resolution by provider/model --------------------------------------------

def _from_configured_provider(provider: Provider, model_name: str, apply: bool,
                              environ: Environ) -> ResolutionResult:
    canonical = provider.find_model(model_name)
    if canonical is None:
        return _fail(
            f'Model "{model_name}" is not supported by configured provider "{provider.provider}". '
            f"Supported models: {_joined(provider.model_names)}"
        )
    entry = ConfigEntry(name=f"{provider.provider}-{canonical}", provider=provider.provider, model=canonical)
    return _succeed(entry, provider, False, apply, environ)


def _missing_key_message(built_in: BuiltInProvider) -> str:
    return (
        f'API key not found for provider "{built_in.key}". '
        f"Please set {built_in.api_key_env} or {EnvVar.API_KEY.value} environment variable."
    )


def _from_built_in_provider(built_in: BuiltInProvider, model_name: str, apply: bool,
                            environ: Environ) -> ResolutionResult:
    canonical = built_in.find_model(model_name)
    if canonical is None:
        return _fail(
            f'Model "{model_name}" is not supported by built-in provider "{built_in.key}". '
            f"Supported models: {_joined(list(built_in.models))}"
        )

    api_key = built_in.api_key(environ)
    if not api_key:
        return _fail(_missing_key_message(built_in))

    provider = Provider(
        provider=built_in.key,
        env=ProviderEnv(
            api_key=api_key,
            base_url=built_in.base_url(canonical, environ),
            models=[ModelEntry(model=m) for m in built_in.models],
        ),
    )
    entry = ConfigEntry(name=f"{built_in.key}-{canonical}", provider=built_in.key, model=canonical)
    return _succeed(entry, provider, True, apply, environ)


def _available_providers(config_file: Optional[ConfigFile]) -> List[str]:
    names = get_all_provider_names(config_file) if config_file else []
    return names + [k for k in get_built_in_provider_names() if k not in {n.lower() for n in names}]


def resolve_configuration_by_provider_model(provider_name: str, model_name: str,
                                            config_file: Optional[ConfigFile] = None,
                                            apply: bool = True, environ: Environ = None) -> ResolutionResult:
    """Declared providers win; the built-in registry is the fallback."""
    configured_error = None
    if config_file is not None:
        declared = find_provider_by_name(provider_name, config_file)
        if declared is not None:
            configured = _from_configured_provider(declared, model_name, apply, environ)
            if configured.success:
                return configured
            configured_error = configured.error

    built_in = get_built_in_provider(provider_name)
    if built_in is None:
        if configured_error:
            return _fail(configured_error)
        return _fail(
            f'Provider "{provider_name}" not found. '
            f"Available providers: {_joined(_available_providers(config_file))}"
        )

    result = _from_built_in_provider(built_in, model_name, apply, environ)
    if not result.success and configured_error:
        result.error = f"{configured_error}. {result.error}"
    return result


# --- previews (never mutate the environment) ---------------------------------

def _provider_warnings(result: ValidationResult, provider: Provider) -> None:
    if provider.env.api_key and len(provider.env.api_key) < DEFAULTS["MIN_API_KEY_LENGTH"]:
        result.warn(f'API key for provider "{provider.provider}" seems unusually short')
    if provider.env.base_url and not provider.env.base_url.startswith("https://"):
        result.warn(f'Base URL for provider "{provider.provider}" does not use HTTPS')


def validate_configuration_resolution(config_name: str, config_file: ConfigFile) -> ValidationResult:
    result = ValidationResult()

    entry = find_configuration_by_name(config_name, config_file)
    if entry is None:
        available = _joined(get_all_configuration_names(config_file))
        result.error(f'Configuration "{config_name}" not found. Available configurations: {available}')
        return result

    provider = config_file.find_provider(entry.provider)
    if provider is None:
        result.error(
            f'Provider "{entry.provider}" not found for configuration "{config_name}". '
            f"Available providers: {_joined(get_all_provider_names(config_file))}"
        )
        return result

    if not provider.has_model(entry.model):
        result.error(
            f'Model "{entry.model}" is not supported by provider "{provider.provider}". '
            f"Supported models: {_joined(provider.model_names)}"
        )

    if not provider.env.api_key.strip():
        result.error(f'Provider "{provider.provider}" is missing API key')

    if not provider.env.base_url.strip():
        result.error(f'Provider "{provider.provider}" is missing base URL')
    elif not is_valid_url(provider.env.base_url):
        result.error(f'Provider "{provider.provider}" has invalid base URL: {provider.env.base_url}')

    _provider_warnings(result, provider)
    return result


def validate_provider_model_resolution(provider_name: str, model_name: str,
                                       config_file: Optional[ConfigFile] = None,
                                       environ: Environ = None) -> ValidationResult:
    result = ValidationResult()

    declared = find_provider_by_name(provider_name, config_file) if config_file is not None else None
    if declared is not None and declared.find_model(model_name) is not None:
        if not declared.env.api_key.strip():
            result.error(f'Configured provider "{declared.provider}" is missing API key')
        if not declared.env.base_url.strip():
            result.error(f'Configured provider "{declared.provider}" is missing base URL')
        elif not is_valid_url(declared.env.base_url):
            result.error(f'Configured provider "{declared.provider}" has invalid base URL: {declared.env.base_url}')
        _provider_warnings(result, declared)
        return result

    built_in = get_built_in_provider(provider_name)
    if built_in is None:
        if declared is not None:
            result.error(
                f'Model "{model_name}" is not supported by configured provider "{declared.provider}". '
                f"Supported models: {_joined(declared.model_names)}"
            )
        else:
            result.error(
                f'Provider "{provider_name}" not found. '
                f"Available providers: {_joined(_available_providers(config_file))}"
            )
        return result

    if built_in.find_model(model_name) is None:
        result.error(
            f'Model "{model_name}" is not supported by built-in provider "{built_in.key}". '
            f"Supported models: {_joined(list(built_in.models))}"
        )

    if not built_in.api_key(environ):
        result.error(_missing_key_message(built_in))

    return result


__all__ = [
    "BUILT_IN_PROVIDERS",
    "ResolutionResult",
    "find_configuration_by_name",
    "find_provider_by_name",
    "get_all_configuration_names",
    "get_all_provider_names",
    "get_models_for_provider",
    "get_models_for_built_in_provider",
    "get_built_in_provider_names",
    "is_built_in_provider",
    "get_current_default_configuration",
    "resolve_configuration_by_name",
    "resolve_configuration_by_provider_model",
    "resolve_default_configuration",
    "set_default_configuration",
    "validate_configuration_resolution",
    "validate_provider_model_resolution",
]
