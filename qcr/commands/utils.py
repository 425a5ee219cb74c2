from typing import Optional, Union

from ..config.discovery import list_potential_config_paths
from ..config.loader import LoadedConfig, discover_and_load_config
from ..errors import (ConfigLoadError, ConfigNotFoundError, config_file_not_found_error, config_load_error,
                      config_validation_error, create_error_result)
from ..util.types import CommandResult


def load_config_for_command(cwd: Optional[str] = None,
                            require_valid: bool = True) -> Union[LoadedConfig, CommandResult]:
    """Loaded document, or the CommandResult describing why it is unusable."""
    try:
        loaded = discover_and_load_config(cwd)
    except ConfigNotFoundError:
        return create_error_result(config_file_not_found_error(list_potential_config_paths(cwd)))
    except ConfigLoadError as e:
        return create_error_result(config_load_error(str(e)))

    if require_valid and (not loaded.validation.is_valid or loaded.config is None):
        return create_error_result(config_validation_error(loaded.validation.errors, loaded.validation.warnings))
    return loaded
