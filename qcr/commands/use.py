import shlex
from typing import Optional

from .utils import load_config_for_command
from ..env import EnvironmentVariables, validate_environment_variables
from ..errors import (create_error_result, create_success_result, configuration_not_found_error,
                      environment_not_set_error, no_default_configuration_error, resolution_error)
from ..resolver import (find_configuration_by_name, get_all_configuration_names,
                        get_current_default_configuration, resolve_configuration_by_name)
from ..util.secrets import mask_secret
from ..util.types import CommandResult


def shell_exports(env_vars: EnvironmentVariables) -> str:
    """POSIX `export` lines a parent shell can eval to adopt the configuration."""
    return "\n".join(f"export {k}={shlex.quote(v)}" for k, v in env_vars.as_environ().items())


def describe_environment(env_vars: EnvironmentVariables) -> str:
    return (
        "Environment variables set:\n"
        f"  OPENAI_API_KEY: {mask_secret(env_vars.API_KEY)}\n"
        f"  OPENAI_BASE_URL: {env_vars.BASE_URL}\n"
        f"  OPENAI_MODEL: {env_vars.MODEL}"
    )


def use_command(config_name: Optional[str] = None, cwd: Optional[str] = None,
                verbose: bool = False, export: bool = False) -> CommandResult:
    """Activate `config_name`, or the default configuration when omitted."""
    loaded = load_config_for_command(cwd)
    if isinstance(loaded, CommandResult):
        return loaded
    config = loaded.config

    use_default = not config_name
    if use_default:
        config_name = get_current_default_configuration(config)
        if not config_name:
            return create_error_result(no_default_configuration_error(get_all_configuration_names(config)))
    elif find_configuration_by_name(config_name, config) is None:
        return create_error_result(configuration_not_found_error(config_name, get_all_configuration_names(config)))

    resolution = resolve_configuration_by_name(config_name, config)
    if not resolution.success:
        return create_error_result(resolution_error(f"Failed to activate configuration '{config_name}'",
                                                    resolution.error))

    env_validation = validate_environment_variables()
    if not env_validation.is_valid:
        return create_error_result(environment_not_set_error(env_validation.errors))

    if export:
        return create_success_result(shell_exports(resolution.environment_variables))

    source = "default configuration" if use_default else "specified configuration"
    details = f"Provider: {resolution.provider.provider}, Model: {resolution.config_entry.model}"
    if verbose:
        details += f"\nConfiguration file: {loaded.file_path}"
        details += "\n" + describe_environment(resolution.environment_variables)
        if env_validation.warnings:
            details += f"\nWarnings: {', '.join(env_validation.warnings)}"
    return create_success_result(f"Successfully activated {source} '{config_name}'", details)
