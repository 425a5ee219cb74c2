"""Error taxonomy, exit codes and user-facing error messages.

Engine functions report expected failures as result objects; the only
exceptions are the persistence ones below, which the startup flow and the
commands translate into ``CommandResult`` values with an exit code.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from .util.const import ExitCode, REQUIRED_ENV_VARS, CONFIG_FILE_NAMES, USER_CONFIG_DIR
from .util.types import CommandResult


class ConfigLoadError(Exception):
    """The configuration file exists but could not be read or parsed."""

    def __init__(self, message: str, file_path: Optional[str] = None) -> None:
        super().__init__(message)
        self.file_path = file_path


class ConfigNotFoundError(ConfigLoadError):
    """No configuration file in any searched location."""

    def __init__(self, search_paths: Sequence[str]) -> None:
        self.search_paths = list(search_paths)
        names = [n for group in CONFIG_FILE_NAMES.values() for n in group]
        super().__init__(
            "No configuration file found. Searched in:\n"
            + "\n".join(f"  - {p}" for p in self.search_paths)
            + f"\n\nExpected file names: {', '.join(names)}"
        )


class ErrorCategory(str, Enum):
    CONFIG_FILE = "Configuration File"
    VALIDATION = "Validation"
    ENVIRONMENT = "Environment"
    COMMAND = "Command"
    SYSTEM = "System"


@dataclass
class ErrorMessage:
    message: str
    exit_code: int
    details: Optional[str] = None
    suggestions: List[str] = field(default_factory=list)
    available_options: List[str] = field(default_factory=list)
    category: Optional[ErrorCategory] = None


def _bullets(items: Sequence[str], mark: str) -> str:
    return "\n".join(f"  {mark} {item}" for item in items)


def create_error_result(error: ErrorMessage) -> CommandResult:
    parts = []
    if error.details:
        parts.append(error.details)
    if error.available_options:
        parts.append(f"Available options:\n{_bullets(error.available_options, '-')}")
    if error.suggestions:
        parts.append(f"Suggestions:\n{_bullets(error.suggestions, '•')}")
    return CommandResult(
        success=False,
        message=error.message,
        details="\n\n".join(parts) or None,
        exit_code=int(error.exit_code),
    )


def create_success_result(message: str, details: Optional[str] = None,
                          exit_code: int = ExitCode.SUCCESS) -> CommandResult:
    return CommandResult(success=True, message=message, details=details, exit_code=int(exit_code))


def config_file_not_found_error(search_paths: Sequence[str]) -> ErrorMessage:
    return ErrorMessage(
        message="Configuration file not found",
        details=f"Searched in the following locations:\n{_bullets(search_paths, '-')}",
        suggestions=[
            "Create a configuration file in the current directory or in ~/.qcr",
            'Use "config.yaml" or "config.json" as the filename',
            "Or set " + ", ".join(v.value for v in REQUIRED_ENV_VARS) + " directly in the environment",
        ],
        available_options=[
            "config.yaml (recommended)",
            "config.json",
            f"~/{USER_CONFIG_DIR}/config.yaml",
            f"~/{USER_CONFIG_DIR}/config.json",
        ],
        category=ErrorCategory.CONFIG_FILE,
        exit_code=ExitCode.CONFIG_NOT_FOUND,
    )


def config_load_error(message: str) -> ErrorMessage:
    return ErrorMessage(
        message="Failed to load configuration file",
        details=message,
        suggestions=["Check file permissions", "Verify the file is valid YAML or JSON"],
        category=ErrorCategory.CONFIG_FILE,
        exit_code=ExitCode.CONFIG_INVALID,
    )


def config_validation_error(errors: Sequence[str], warnings: Sequence[str] = ()) -> ErrorMessage:
    details = f"Configuration validation errors:\n{_bullets(errors, '✗')}"
    if warnings:
        details += f"\n\nWarnings:\n{_bullets(warnings, '⚠')}"
    return ErrorMessage(
        message="Configuration file validation failed",
        details=details,
        suggestions=[
            "Fix the errors listed above",
            'Run "qcr chk" to validate all configurations',
        ],
        category=ErrorCategory.VALIDATION,
        exit_code=ExitCode.CONFIG_VALIDATION_FAILED,
    )


def configuration_not_found_error(config_name: str, available: Sequence[str]) -> ErrorMessage:
    return ErrorMessage(
        message=f"Configuration '{config_name}' not found",
        available_options=list(available),
        suggestions=['Run "qcr list config" to see all configurations'],
        category=ErrorCategory.VALIDATION,
        exit_code=ExitCode.CONFIG_INVALID,
    )


def no_default_configuration_error(available: Sequence[str]) -> ErrorMessage:
    return ErrorMessage(
        message="No default configuration set and no configuration name provided",
        available_options=list(available),
        suggestions=['Use "qcr set-default <config_name>" to set a default configuration'],
        category=ErrorCategory.VALIDATION,
        exit_code=ExitCode.CONFIG_INVALID,
    )


def provider_not_found_error(provider_name: str, available: Sequence[str]) -> ErrorMessage:
    return ErrorMessage(
        message=f"Provider '{provider_name}' not found",
        available_options=list(available),
        suggestions=['Run "qcr list provider --all" to see providers and models'],
        category=ErrorCategory.VALIDATION,
        exit_code=ExitCode.CONFIG_INVALID,
    )


def resolution_error(message: str, details: Optional[str]) -> ErrorMessage:
    return ErrorMessage(
        message=message,
        details=details,
        category=ErrorCategory.VALIDATION,
        exit_code=ExitCode.CONFIG_INVALID,
    )


def environment_not_set_error(errors: Sequence[str]) -> ErrorMessage:
    return ErrorMessage(
        message="Required environment variables are not set",
        details=_bullets(errors, "✗"),
        suggestions=[
            'Run "qcr use <config_name>" to activate a configuration',
            "Or export the variables yourself:",
        ] + [f"{v.value}=your_{v.name.lower()}" for v in REQUIRED_ENV_VARS],
        category=ErrorCategory.ENVIRONMENT,
        exit_code=ExitCode.ENVIRONMENT_ERROR,
    )


def process_launch_error(command: str, reason: str) -> ErrorMessage:
    return ErrorMessage(
        message=f"Failed to launch {command}",
        details=reason,
        suggestions=[
            f'Make sure "{command}" is installed and on your PATH',
            "Set QCR_QWEN_COMMAND to override the launched command",
        ],
        category=ErrorCategory.SYSTEM,
        exit_code=ExitCode.COMMAND_NOT_FOUND,
    )


def invalid_arguments_error(command: str, reason: str, usage: str) -> ErrorMessage:
    return ErrorMessage(
        message=f"Invalid arguments for '{command}'",
        details=f"{reason}\n\nUsage: {usage}",
        category=ErrorCategory.COMMAND,
        exit_code=ExitCode.INVALID_USAGE,
    )


def unexpected_error(operation: str, error: BaseException) -> ErrorMessage:
    return ErrorMessage(
        message=f"Unexpected error during {operation}",
        details=str(error) or type(error).__name__,
        category=ErrorCategory.SYSTEM,
        exit_code=ExitCode.GENERAL_ERROR,
    )


def model_not_supported_error(provider_name: str, model_name: str, supported: Sequence[str]) -> ErrorMessage:
    return ErrorMessage(
        message=f"Model '{model_name}' is not supported by provider '{provider_name}'",
        available_options=list(supported),
        suggestions=[f'Run "qcr list provider {provider_name}" to see its models'],
        category=ErrorCategory.VALIDATION,
        exit_code=ExitCode.CONFIG_INVALID,
    )
