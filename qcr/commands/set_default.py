from typing import Optional

from .utils import load_config_for_command
from ..config.loader import save_config_file
from ..errors import ConfigLoadError, config_load_error, create_error_result, create_success_result, resolution_error
from ..resolver import get_current_default_configuration, set_default_configuration
from ..util.types import CommandResult


def set_default_command(config_name: str, cwd: Optional[str] = None, verbose: bool = False) -> CommandResult:
    loaded = load_config_for_command(cwd)
    if isinstance(loaded, CommandResult):
        return loaded

    previous = get_current_default_configuration(loaded.config)
    outcome = set_default_configuration(config_name, loaded.config)
    if not outcome.is_valid:
        return create_error_result(resolution_error(f"Cannot set default configuration to '{config_name}'",
                                                    "\n".join(outcome.errors)))

    try:
        save_config_file(loaded.config, loaded.file_path)
    except ConfigLoadError as e:
        return create_error_result(config_load_error(str(e)))

    details = None
    if verbose:
        details = f"Configuration file: {loaded.file_path}\nPrevious default: {previous or '(none)'}"
    return create_success_result(f"Default configuration set to '{config_name}'", details)
