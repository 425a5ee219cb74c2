"""Command handlers. Each returns a ``CommandResult``; ``qcr.cli`` renders it."""

from .use import use_command
from .router import router_command
from .set_default import set_default_command
from .list import list_config_command, list_provider_command
from .chk import chk_command
from .run import run_command
from .startup import startup_flow_command, startup_status_command, ready_check_command

__all__ = [
    "use_command",
    "router_command",
    "set_default_command",
    "list_config_command",
    "list_provider_command",
    "chk_command",
    "run_command",
    "startup_flow_command",
    "startup_status_command",
    "ready_check_command",
]
