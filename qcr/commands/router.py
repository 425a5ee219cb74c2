from typing import List, Optional

from .use import describe_environment, shell_exports
from ..config.loader import discover_and_load_config
from ..errors import (ConfigLoadError, ConfigNotFoundError, config_load_error, config_validation_error,
                      create_error_result, create_success_result, environment_not_set_error,
                      model_not_supported_error, resolution_error)
from ..env import validate_environment_variables
from ..resolver import (get_models_for_built_in_provider, get_models_for_provider,
                        resolve_configuration_by_provider_model)
from ..util.logging import log
from ..util.types import CommandResult


def _supported_models(provider: str, config) -> Optional[List[str]]:
    """Declared and built-in models for `provider`, or None when it is unknown."""
    declared = get_models_for_provider(provider, config) if config is not None else None
    built_in = get_models_for_built_in_provider(provider)
    if declared is None and built_in is None:
        return None
    return (declared or []) + [m for m in built_in or [] if m not in (declared or [])]


def router_command(provider: str, model: str, cwd: Optional[str] = None,
                   verbose: bool = False, export: bool = False) -> CommandResult:
    """Activate a provider/model pair; works without any configuration file."""
    config = None
    file_path = None
    try:
        loaded = discover_and_load_config(cwd)
    except ConfigNotFoundError:
        log("INFO", "commands.router", "no configuration file, built-in providers only")
    except ConfigLoadError as e:
        return create_error_result(config_load_error(str(e)))
    else:
        if not loaded.validation.is_valid or loaded.config is None:
            return create_error_result(config_validation_error(loaded.validation.errors,
                                                               loaded.validation.warnings))
        config = loaded.config
        file_path = loaded.file_path

    resolution = resolve_configuration_by_provider_model(provider, model, config)
    if not resolution.success:
        supported = _supported_models(provider, config)
        if supported is not None and not any(m.casefold() == model.casefold() for m in supported):
            return create_error_result(model_not_supported_error(provider, model, supported))
        return create_error_result(resolution_error(f"Failed to route to {provider}/{model}", resolution.error))

    env_validation = validate_environment_variables()
    if not env_validation.is_valid:
        return create_error_result(environment_not_set_error(env_validation.errors))

    if export:
        return create_success_result(shell_exports(resolution.environment_variables))

    source = "built-in provider" if resolution.used_built_in_provider else "configured provider"
    details = f"Provider: {resolution.provider.provider} ({source}), Model: {resolution.config_entry.model}"
    if verbose:
        if file_path:
            details += f"\nConfiguration file: {file_path}"
        details += "\n" + describe_environment(resolution.environment_variables)
    return create_success_result(
        f"Successfully configured {resolution.provider.provider} with model {resolution.config_entry.model}",
        details,
    )
