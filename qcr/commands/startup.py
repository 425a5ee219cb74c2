from typing import Optional

from ..errors import create_success_result
from ..startup import (execute_startup_flow, format_startup_flow_result, get_startup_status,
                       get_startup_step_description, is_ready_to_launch)
from ..util.const import ExitCode
from ..util.types import CommandResult


def startup_flow_command(cwd: Optional[str] = None, execute: bool = False) -> CommandResult:
    """Validate the startup flow, or with `execute` also activate the default configuration."""
    if execute:
        result = execute_startup_flow(cwd)
        formatted = format_startup_flow_result(result)
        if result.success:
            formatted.message = "Startup flow completed; default configuration is active"
        return formatted
    return format_startup_flow_result(get_startup_status(cwd))


def startup_status_command(cwd: Optional[str] = None, verbose: bool = False) -> CommandResult:
    status = get_startup_status(cwd)
    lines = [f"Current step: {get_startup_step_description(status.current_step)}"]
    if status.used_environment_fallback:
        lines.append("Source: environment variables")
    if status.config_file_path:
        lines.append(f"Configuration file: {status.config_file_path}")
    if status.default_config_name:
        lines.append(f"Default configuration: {status.default_config_name}")
    if not status.success:
        lines.append(f"Error: {status.error_message}")
        if verbose and status.error_details:
            lines.append(status.error_details)
    return CommandResult(
        success=status.success,
        message="Ready to launch" if status.success else "Not ready to launch",
        details="\n".join(lines),
        exit_code=int(status.exit_code),
    )


def ready_check_command(cwd: Optional[str] = None) -> CommandResult:
    if is_ready_to_launch(cwd):
        return create_success_result("Ready")
    return CommandResult(success=False, message="Not ready", exit_code=int(ExitCode.GENERAL_ERROR))
