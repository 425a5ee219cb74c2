from typing import Callable, Optional, Sequence

from .use import describe_environment
from ..env import get_required_environment_variables, validate_environment_variables
from ..launcher import launch, qwen_command
from ..startup import execute_startup_flow, format_startup_flow_result
from ..util.logging import log
from ..util.types import CommandResult


def launch_summary(args: Sequence[str] = ()) -> str:
    """Masked view of what qwen is about to receive."""
    lines = [f"Command: {' '.join([qwen_command(), *args])}",
             describe_environment(get_required_environment_variables())]
    warnings = validate_environment_variables().warnings
    if warnings:
        lines.append("Warnings:")
        lines.extend(f"  ⚠ {w}" for w in warnings)
    return "\n".join(lines)


def run_command(args: Sequence[str] = (), cwd: Optional[str] = None, verbose: bool = False,
                notify: Optional[Callable[[str], None]] = None) -> CommandResult:
    """Launch qwen, activating the default configuration first if the environment is incomplete.

    With `verbose`, the launch summary is handed to `notify` before the process starts.
    """
    if not validate_environment_variables().is_valid:
        log("INFO", "commands.run", "environment incomplete, running startup flow")
        startup = execute_startup_flow(cwd)
        if not startup.success:
            return format_startup_flow_result(startup)
        if verbose and notify and startup.default_config_name:
            notify(f"Activated default configuration '{startup.default_config_name}'")
    if verbose and notify:
        notify(launch_summary(args))
    return launch(args)
