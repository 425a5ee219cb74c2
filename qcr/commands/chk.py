from typing import List, Optional

from .utils import load_config_for_command
from ..config.validation import validate_config_file
from ..errors import configuration_not_found_error, create_error_result, create_success_result
from ..resolver import find_configuration_by_name, get_all_configuration_names, validate_configuration_resolution
from ..util.const import ExitCode
from ..util.types import CommandResult, ValidationResult


def _report(name: str, outcome: ValidationResult, verbose: bool) -> List[str]:
    lines = [f"{'✓' if outcome.is_valid else '✗'} {name}"]
    lines.extend(f"    error: {e}" for e in outcome.errors)
    if verbose:
        lines.extend(f"    warning: {w}" for w in outcome.warnings)
    return lines


def chk_command(config_name: Optional[str] = None, cwd: Optional[str] = None,
                verbose: bool = False) -> CommandResult:
    """Static check of one configuration, or of the whole file. No network access."""
    loaded = load_config_for_command(cwd, require_valid=False)
    if isinstance(loaded, CommandResult):
        return loaded

    if loaded.config is None:
        details = "\n".join(f"  ✗ {e}" for e in loaded.validation.errors)
        return CommandResult(success=False, message="Configuration file structure is invalid",
                             details=details, exit_code=int(ExitCode.CONFIG_VALIDATION_FAILED))
    config = loaded.config

    if config_name:
        if find_configuration_by_name(config_name, config) is None:
            return create_error_result(configuration_not_found_error(config_name,
                                                                     get_all_configuration_names(config)))
        outcome = validate_configuration_resolution(config_name, config)
        details = "\n".join(_report(config_name, outcome, verbose))
        if outcome.is_valid:
            return create_success_result(f"Configuration '{config_name}' is valid", details)
        return CommandResult(success=False, message=f"Configuration '{config_name}' is invalid",
                             details=details, exit_code=int(ExitCode.CONFIG_INVALID))

    file_outcome = validate_config_file(config)
    lines = _report(f"configuration file {loaded.file_path}", file_outcome, verbose)
    failed = 0 if file_outcome.is_valid else 1
    for name in get_all_configuration_names(config):
        outcome = validate_configuration_resolution(name, config)
        if not outcome.is_valid:
            failed += 1
        lines.extend(_report(name, outcome, verbose))

    details = "\n".join(lines)
    if failed:
        return CommandResult(success=False, message=f"Validation failed ({failed} problem(s) found)",
                             details=details, exit_code=int(ExitCode.CONFIG_VALIDATION_FAILED))
    return create_success_result("All configurations are valid", details)
