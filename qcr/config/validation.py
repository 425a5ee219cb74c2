"""Structural and cross-reference validation of the configuration document.

Every function returns a ``ValidationResult`` and never raises for a malformed
document: the checks are exhaustive so that one pass reports every defect.
Functions accept the raw mapping produced by the loader; a typed
``ConfigFile`` is converted back to its document form first.
"""

from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .schema import ConfigFile
from ..util.types import ValidationResult
from ..util.urls import is_valid_url

Document = Union[Mapping[str, Any], ConfigFile]


def _as_document(config: Any) -> Any:
    if isinstance(config, ConfigFile):
        return config.to_document()
    return config


def _check_string(result: ValidationResult, value: Any, prefix: str, field: str) -> bool:
    if not isinstance(value, str):
        result.error(f"{prefix}: {field} must be a string")
        return False
    if not value.strip():
        result.error(f"{prefix}: {field} cannot be empty")
        return False
    return True


def _duplicates(names: Sequence[str]) -> List[str]:
    """Each repeated name once, in order of first repetition."""
    seen, dupes = set(), []
    for name in names:
        if name in seen and name not in dupes:
            dupes.append(name)
        seen.add(name)
    return dupes


def _entry_names(configs: Any) -> List[str]:
    names: List[str] = []
    if not isinstance(configs, list):
        return names
    for cfg in configs:
        entries = cfg.get("config") if isinstance(cfg, Mapping) else None
        if not isinstance(entries, list):
            continue
        for entry in entries:
            if isinstance(entry, Mapping) and isinstance(entry.get("name"), str):
                names.append(entry["name"])
    return names


def validate_config_file(config: Optional[Document]) -> ValidationResult:
    result = ValidationResult()
    config = _as_document(config)

    if config is None:
        result.error("Configuration file is null or undefined")
        return result
    if not isinstance(config, Mapping):
        result.error("Configuration file must be an object at the root level")
        return result

    configs = config.get("configs")
    providers = config.get("providers")
    configs_ok = isinstance(configs, list)
    providers_ok = isinstance(providers, list)

    if not configs_ok:
        result.error('Missing or invalid "configs" array')
    if not providers_ok:
        result.error('Missing or invalid "providers" array')

    if "default_config" in config and config.get("default_config") is not None:
        result.extend(validate_default_config(config["default_config"], configs if configs_ok else None))

    if configs_ok:
        for index, cfg in enumerate(configs):
            result.extend(validate_config(cfg, index))

    if providers_ok:
        for index, provider in enumerate(providers):
            result.extend(validate_provider(provider, index))

    if configs_ok and providers_ok:
        result.extend(validate_provider_model_cross_references(configs, providers))

    if configs_ok:
        result.extend(validate_unique_config_names(configs))

    if providers_ok:
        result.extend(validate_unique_provider_names(providers))

    return result


def validate_default_config(default_config: Any, configs: Any) -> ValidationResult:
    """Only the first entry is authoritative; extras are a warning."""
    result = ValidationResult()

    if not isinstance(default_config, list):
        result.error("default_config must be an array")
        return result

    if not default_config:
        result.warn("default_config array is empty")
        return result

    if len(default_config) > 1:
        result.warn("Multiple default configurations found, only the first will be used")

    first = default_config[0]
    name = first.get("name") if isinstance(first, Mapping) else None
    if not isinstance(name, str):
        result.error("default_config[0] must have a valid name string")
        return result
    if not name.strip():
        result.error("default_config name cannot be empty")
        return result

    if isinstance(configs, list) and name not in _entry_names(configs):
        result.error(f'Default configuration "{name}" does not exist in configs array')

    return result


def validate_config(config: Any, index: int) -> ValidationResult:
    result = ValidationResult()
    prefix = f"configs[{index}]"

    if config is None:
        result.error(f"{prefix}: Configuration is null or undefined")
        return result
    if not isinstance(config, Mapping):
        result.error(f"{prefix}: Configuration must be an object")
        return result

    config_name = config.get("config_name")
    if config_name is not None and not isinstance(config_name, str):
        result.error(f"{prefix}: config_name must be a string")

    entries = config.get("config")
    if not isinstance(entries, list):
        result.error(f"{prefix}: config must be an array")
        return result

    if not entries:
        result.error(f"{prefix}: config array cannot be empty")

    for entry_index, entry in enumerate(entries):
        result.extend(validate_config_entry(entry, f"{prefix}.config[{entry_index}]"))

    return result


def validate_config_entry(entry: Any, prefix: str) -> ValidationResult:
    result = ValidationResult()

    if entry is None:
        result.error(f"{prefix}: Configuration entry is null or undefined")
        return result
    if not isinstance(entry, Mapping):
        result.error(f"{prefix}: Configuration entry must be an object")
        return result

    _check_string(result, entry.get("name"), prefix, "name")
    _check_string(result, entry.get("provider"), prefix, "provider")
    _check_string(result, entry.get("model"), prefix, "model")
    return result


def validate_provider(provider: Any, index: int) -> ValidationResult:
    result = ValidationResult()
    prefix = f"providers[{index}]"

    if provider is None:
        result.error(f"{prefix}: Provider is null or undefined")
        return result
    if not isinstance(provider, Mapping):
        result.error(f"{prefix}: Provider must be an object")
        return result

    _check_string(result, provider.get("provider"), prefix, "provider")

    env = provider.get("env")
    if env is None:
        result.error(f"{prefix}: env object is required")
    else:
        result.extend(validate_provider_env(env, f"{prefix}.env"))

    return result


def validate_provider_env(env: Any, prefix: str) -> ValidationResult:
    result = ValidationResult()

    if env is None:
        result.error(f"{prefix}: Provider environment is null or undefined")
        return result
    if not isinstance(env, Mapping):
        result.error(f"{prefix}: Provider environment must be an object")
        return result

    _check_string(result, env.get("api_key"), prefix, "api_key")

    if _check_string(result, env.get("base_url"), prefix, "base_url"):
        if not is_valid_url(env["base_url"]):
            result.error(f"{prefix}: base_url is not a valid URL format")

    models = env.get("models")
    if not isinstance(models, list):
        result.error(f"{prefix}: models must be an array")
        return result

    # a provider may be declared before its models are settled
    if not models:
        result.warn(f"{prefix}: models array is empty")

    for model_index, model in enumerate(models):
        result.extend(validate_model_entry(model, f"{prefix}.models[{model_index}]"))

    names = [m["model"] for m in models if isinstance(m, Mapping) and isinstance(m.get("model"), str)]
    duplicates = _duplicates(names)
    if duplicates:
        result.warn(f"{prefix}: Duplicate model names found: {', '.join(duplicates)}")

    return result


def validate_model_entry(model: Any, prefix: str) -> ValidationResult:
    result = ValidationResult()

    if model is None:
        result.error(f"{prefix}: Model entry is null or undefined")
        return result
    if not isinstance(model, Mapping):
        result.error(f"{prefix}: Model entry must be an object")
        return result

    _check_string(result, model.get("model"), prefix, "model")
    return result


def validate_provider_model_cross_references(configs: Any, providers: Any,
                                             group_indices: Optional[List[int]] = None) -> ValidationResult:
    """Every entry must name a declared provider and one of that provider's models."""
    result = ValidationResult()
    if not isinstance(configs, list) or not isinstance(providers, list):
        return result

    provider_map: Dict[str, Mapping[str, Any]] = {}
    for provider in providers:
        if isinstance(provider, Mapping) and isinstance(provider.get("provider"), str):
            provider_map.setdefault(provider["provider"], provider)

    for position, cfg in enumerate(configs):
        config_index = group_indices[position] if group_indices else position
        entries = cfg.get("config") if isinstance(cfg, Mapping) else None
        if not isinstance(entries, list):
            continue

        for entry_index, entry in enumerate(entries):
            if not isinstance(entry, Mapping):
                continue
            prefix = f"configs[{config_index}].config[{entry_index}]"
            provider_name = entry.get("provider")
            if not isinstance(provider_name, str) or not provider_name.strip():
                continue

            provider = provider_map.get(provider_name)
            if provider is None:
                result.error(f'{prefix}: Provider "{provider_name}" not found in providers array')
                continue

            model = entry.get("model")
            if not isinstance(model, str) or not model.strip():
                continue
            env = provider.get("env")
            models = env.get("models") if isinstance(env, Mapping) else None
            known = [m.get("model") for m in models if isinstance(m, Mapping)] if isinstance(models, list) else []
            if model not in known:
                result.error(f'{prefix}: Model "{model}" not found in provider "{provider_name}" models list')

    return result


def validate_unique_config_names(configs: Any) -> ValidationResult:
    result = ValidationResult()
    duplicates = _duplicates(_entry_names(configs))
    if duplicates:
        result.error(f"Duplicate configuration names found: {', '.join(duplicates)}")
    return result


def validate_unique_provider_names(providers: Any) -> ValidationResult:
    result = ValidationResult()
    if not isinstance(providers, list):
        return result
    names = [p["provider"] for p in providers if isinstance(p, Mapping) and isinstance(p.get("provider"), str)]
    duplicates = _duplicates(names)
    if duplicates:
        result.error(f"Duplicate provider names found: {', '.join(duplicates)}")
    return result


def validate_configuration_by_name(config_name: str, config: Document) -> ValidationResult:
    """Validate the group holding `config_name` plus its cross references only."""
    result = ValidationResult()
    config = _as_document(config)

    if not isinstance(config_name, str) or not config_name:
        result.error("Configuration name must be a non-empty string")
        return result
    if not isinstance(config, Mapping):
        result.error("Configuration file is null or undefined")
        return result

    configs = config.get("configs") if isinstance(config.get("configs"), list) else []
    found_index = None
    for index, cfg in enumerate(configs):
        entries = cfg.get("config") if isinstance(cfg, Mapping) else None
        if isinstance(entries, list) and any(
                isinstance(e, Mapping) and e.get("name") == config_name for e in entries):
            found_index = index
            break

    if found_index is None:
        result.error(f'Configuration "{config_name}" not found')
        available = _entry_names(configs)
        if available:
            result.error(f"Available configurations: {', '.join(available)}")
        return result

    group = configs[found_index]
    result.extend(validate_config(group, found_index))

    providers = config.get("providers")
    if isinstance(providers, list):
        result.extend(validate_provider_model_cross_references([group], providers, [found_index]))

    return result
