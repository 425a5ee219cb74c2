"""Spawns the downstream `qwen` CLI with the active environment."""

import os
import subprocess
from typing import MutableMapping, Optional, Sequence

from .errors import create_error_result, create_success_result, process_launch_error, unexpected_error
from .util.const import DEFAULTS, ExitCode
from .util.logging import log
from .util.types import CommandResult


def qwen_command(environ: Optional[MutableMapping[str, str]] = None) -> str:
    source = environ if environ is not None else os.environ
    return source.get("QCR_QWEN_COMMAND") or DEFAULTS["QWEN_COMMAND"]


def launch(args: Sequence[str] = (), environ: Optional[MutableMapping[str, str]] = None) -> CommandResult:
    env = dict(environ if environ is not None else os.environ)
    command = qwen_command(env)
    log("INFO", "launcher", "launching", command=command, args=list(args))
    try:
        completed = subprocess.run([command, *args], env=env, check=False)
    except (FileNotFoundError, PermissionError) as e:
        return create_error_result(process_launch_error(command, str(e)))
    except KeyboardInterrupt:
        return CommandResult(success=False, message=f"{command} interrupted", exit_code=int(ExitCode.INTERRUPTED))
    except OSError as e:
        return create_error_result(unexpected_error(f"launch of {command}", e))

    if completed.returncode < 0:
        # killed by a signal; report it the way a shell would
        return CommandResult(success=False, message=f"{command} terminated by signal {-completed.returncode}",
                             exit_code=128 - completed.returncode)
    if completed.returncode:
        return CommandResult(success=False, message=f"{command} exited with code {completed.returncode}",
                             exit_code=completed.returncode)
    return create_success_result(f"{command} exited successfully")
