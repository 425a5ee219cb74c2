"""Startup flow.

Sequences the checks that decide whether Qwen Code can be launched:

    CHECKING_CONFIG_FILE -> CHECKING_DEFAULT_CONFIG -> VALIDATING_DEFAULT_CONFIG
        -> SETTING_ENVIRONMENT -> READY

with FAILED reachable from every step. The *execute* variant writes the
resolved variables into the environment; the *validate* variant resolves with
``apply=False`` and skips SETTING_ENVIRONMENT, so it never mutates anything.

When discovery raises ``ConfigNotFoundError`` (and only then) the flow takes
the environment-variable fallback: the three ``OPENAI_*`` variables already
present in the environment are accepted on their own.
"""

import os
from dataclasses import dataclass
from typing import Callable, Dict, List, MutableMapping, Optional

from .config.loader import LoadedConfig, discover_and_load_config
from .config.schema import ConfigFile
from .env import validate_environment_variables
from .errors import ConfigLoadError, ConfigNotFoundError, create_success_result
from .resolver import get_current_default_configuration, resolve_configuration_by_name
from .util.const import EnvVar, ExitCode, REQUIRED_ENV_VARS, StartupStep
from .util.logging import log
from .util.types import CommandResult
from .util.urls import is_valid_url

Loader = Callable[[Optional[str]], LoadedConfig]


@dataclass
class StartupFlowResult:
    success: bool
    current_step: StartupStep
    exit_code: int = ExitCode.SUCCESS
    failed_step: Optional[StartupStep] = None
    config_file: Optional[ConfigFile] = None
    config_file_path: Optional[str] = None
    default_config_name: Optional[str] = None
    error_message: Optional[str] = None
    error_details: Optional[str] = None
    used_environment_fallback: bool = False


class StartupFlow:
    def __init__(self, cwd: Optional[str] = None, apply: bool = True,
                 loader: Loader = discover_and_load_config,
                 environ: Optional[MutableMapping[str, str]] = None) -> None:
        self.cwd = cwd
        self.apply = apply
        self.loader = loader
        self.environ = environ
        self.result = StartupFlowResult(success=False, current_step=StartupStep.CHECKING_CONFIG_FILE)
        self._handlers: Dict[StartupStep, Callable[[], StartupStep]] = {
            StartupStep.CHECKING_CONFIG_FILE: self._check_config_file,
            StartupStep.CHECKING_DEFAULT_CONFIG: self._check_default_config,
            StartupStep.VALIDATING_DEFAULT_CONFIG: self._validate_default_config,
            StartupStep.SETTING_ENVIRONMENT: self._set_environment,
        }

    def run(self) -> StartupFlowResult:
        step = StartupStep.CHECKING_CONFIG_FILE
        try:
            while step not in (StartupStep.READY, StartupStep.FAILED):
                self.result.current_step = step
                log("DEBUG", "startup", "step", step=step.value, apply=self.apply)
                step = self._handlers[step]()
        except Exception as e:
            step = self._fail(self.result.current_step, "Unexpected error during startup flow",
                              str(e) or type(e).__name__, ExitCode.GENERAL_ERROR)

        self.result.current_step = step
        self.result.success = step is StartupStep.READY
        if self.result.success:
            self.result.exit_code = ExitCode.SUCCESS
        return self.result

    def _fail(self, step: StartupStep, message: str, details: str, exit_code: int) -> StartupStep:
        self.result.failed_step = step
        self.result.error_message = message
        self.result.error_details = details
        self.result.exit_code = int(exit_code)
        log("INFO", "startup", "startup flow failed", step=step.value, message=message)
        return StartupStep.FAILED

    def _check_config_file(self) -> StartupStep:
        step = StartupStep.CHECKING_CONFIG_FILE
        try:
            loaded = self.loader(self.cwd)
        except ConfigNotFoundError as e:
            return self._environment_fallback(str(e))
        except ConfigLoadError as e:
            return self._fail(step, "Failed to load configuration file", str(e), ExitCode.CONFIG_INVALID)

        self.result.config_file_path = loaded.file_path
        if not loaded.validation.is_valid or loaded.config is None:
            return self._fail(step, "Configuration file validation failed",
                              f"Errors: {', '.join(loaded.validation.errors)}",
                              ExitCode.CONFIG_VALIDATION_FAILED)

        self.result.config_file = loaded.config
        return StartupStep.CHECKING_DEFAULT_CONFIG

    def _check_default_config(self) -> StartupStep:
        name = get_current_default_configuration(self.result.config_file)
        if not name:
            return self._fail(StartupStep.CHECKING_DEFAULT_CONFIG, "No default configuration set",
                              'Default configuration is required for startup flow. '
                              'Use "qcr set-default <config_name>" to set one.',
                              ExitCode.CONFIG_INVALID)
        self.result.default_config_name = name
        return StartupStep.VALIDATING_DEFAULT_CONFIG

    def _validate_default_config(self) -> StartupStep:
        name = self.result.default_config_name
        resolution = resolve_configuration_by_name(name, self.result.config_file,
                                                   apply=self.apply, environ=self.environ)
        if not resolution.success:
            return self._fail(StartupStep.VALIDATING_DEFAULT_CONFIG,
                              f"Default configuration '{name}' is invalid",
                              resolution.error or "Configuration resolution failed",
                              ExitCode.CONFIG_INVALID)
        if not self.apply:
            return StartupStep.READY
        return StartupStep.SETTING_ENVIRONMENT

    def _set_environment(self) -> StartupStep:
        # the resolver has already written the variables; confirm they are observable
        validation = validate_environment_variables(self.environ)
        if not validation.is_valid:
            return self._fail(StartupStep.SETTING_ENVIRONMENT,
                              "Environment variables validation failed after setting default configuration",
                              f"Errors: {', '.join(validation.errors)}",
                              ExitCode.ENVIRONMENT_ERROR)
        return StartupStep.READY

    def _environment_fallback(self, not_found_detail: str) -> StartupStep:
        step = StartupStep.CHECKING_CONFIG_FILE
        self.result.used_environment_fallback = True
        source = self.environ if self.environ is not None else os.environ

        missing: List[str] = []
        invalid: List[str] = []
        for var in REQUIRED_ENV_VARS:
            value = source.get(var.value)
            if value is None or not value.strip():
                missing.append(var.value)
            elif var is EnvVar.BASE_URL and not is_valid_url(value):
                invalid.append(f"{var.value} (not a valid URL: {value})")

        if not missing and not invalid:
            log("INFO", "startup", "using environment variables without configuration file")
            return StartupStep.READY

        lines = []
        if missing:
            lines.append(f"Missing environment variables: {', '.join(missing)}")
        if invalid:
            lines.append(f"Invalid environment variables: {', '.join(invalid)}")
        lines.append("")
        lines.append("Either create a configuration file or set all required environment variables:")
        lines.extend(f"  {var.value}=your_{var.name.lower()}" for var in REQUIRED_ENV_VARS)
        lines.append("")
        lines.append(not_found_detail)

        if missing:
            return self._fail(step, "Configuration file not found and required environment variables not set",
                              "\n".join(lines), ExitCode.CONFIG_NOT_FOUND)
        return self._fail(step, "Configuration file not found and environment variables are invalid",
                          "\n".join(lines), ExitCode.ENVIRONMENT_ERROR)


def execute_startup_flow(cwd: Optional[str] = None, loader: Loader = discover_and_load_config,
                         environ: Optional[MutableMapping[str, str]] = None) -> StartupFlowResult:
    """Run the flow and leave the default configuration active in the environment."""
    return StartupFlow(cwd, apply=True, loader=loader, environ=environ).run()


def validate_startup_flow(cwd: Optional[str] = None, loader: Loader = discover_and_load_config,
                          environ: Optional[MutableMapping[str, str]] = None) -> StartupFlowResult:
    """Run the flow without touching the environment."""
    return StartupFlow(cwd, apply=False, loader=loader, environ=environ).run()


def is_ready_to_launch(cwd: Optional[str] = None, loader: Loader = discover_and_load_config,
                       environ: Optional[MutableMapping[str, str]] = None) -> bool:
    result = validate_startup_flow(cwd, loader, environ)
    return result.success and result.current_step is StartupStep.READY


def get_startup_status(cwd: Optional[str] = None, loader: Loader = discover_and_load_config,
                       environ: Optional[MutableMapping[str, str]] = None) -> StartupFlowResult:
    return validate_startup_flow(cwd, loader, environ)


_STEP_DESCRIPTIONS = {
    StartupStep.CHECKING_CONFIG_FILE: "Checking configuration file existence",
    StartupStep.CHECKING_DEFAULT_CONFIG: "Checking default configuration existence",
    StartupStep.VALIDATING_DEFAULT_CONFIG: "Validating default configuration",
    StartupStep.SETTING_ENVIRONMENT: "Setting environment variables",
    StartupStep.READY: "Ready to launch Qwen Code",
    StartupStep.FAILED: "Startup flow failed",
}

_STEP_SUGGESTIONS = {
    StartupStep.CHECKING_CONFIG_FILE: [
        "Create a configuration file (config.yaml or config.json)",
        "Check file permissions and accessibility",
        "Verify file format (YAML or JSON)",
    ],
    StartupStep.CHECKING_DEFAULT_CONFIG: [
        'Set a default configuration using "qcr set-default <config_name>"',
        "Add a default_config section to your configuration file",
        'Use "qcr list config" to see available configurations',
    ],
    StartupStep.VALIDATING_DEFAULT_CONFIG: [
        "Check that the default configuration references a valid provider",
        "Verify that the model is supported by the provider",
        'Use "qcr chk <config_name>" to validate the configuration',
    ],
    StartupStep.SETTING_ENVIRONMENT: [
        "Check that all required environment variables are properly set",
        "Ensure base URL is a valid HTTPS endpoint",
    ],
}

_GENERIC_SUGGESTIONS = [
    "Check the configuration file for any issues",
    "Try running individual commands to diagnose the issue",
]


def get_startup_step_description(step: StartupStep) -> str:
    return _STEP_DESCRIPTIONS.get(step, "Unknown step")


def get_startup_flow_suggestions(step: Optional[StartupStep]) -> List[str]:
    return list(_STEP_SUGGESTIONS.get(step, _GENERIC_SUGGESTIONS))


def format_startup_flow_result(result: StartupFlowResult) -> CommandResult:
    if result.success:
        details = f"Step: {get_startup_step_description(result.current_step)}"
        if result.used_environment_fallback:
            details += "\nUsing environment variables (no configuration file)"
        if result.config_file_path:
            details += f"\nConfiguration file: {result.config_file_path}"
        if result.default_config_name:
            details += f"\nDefault configuration: {result.default_config_name}"
        return create_success_result("Startup flow validation completed successfully", details)

    failed_step = result.failed_step or result.current_step
    details = f"Failed at step: {get_startup_step_description(failed_step)}"
    if result.error_details:
        details += f"\n\nError details:\n{result.error_details}"
    if result.config_file_path:
        details += f"\n\nConfiguration file: {result.config_file_path}"
    suggestions = get_startup_flow_suggestions(failed_step)
    if suggestions:
        details += "\n\nSuggestions:\n" + "\n".join(f"  • {s}" for s in suggestions)

    return CommandResult(
        success=False,
        message=result.error_message or "Startup flow validation failed",
        details=details,
        exit_code=int(result.exit_code),
    )
