"""Imperative shell over the process environment.

The resolver produces an ``EnvironmentVariables`` value; only this module
writes it into ``os.environ``. Every function takes an optional mapping so
callers and tests can work against a private dict instead of the real
process table.
"""

import os
from dataclasses import dataclass, asdict
from typing import Dict, MutableMapping, Optional

from .util.const import EnvVar, REQUIRED_ENV_VARS, DEFAULTS
from .util.secrets import mask_secret
from .util.types import ValidationResult
from .util.urls import is_valid_url
from .util.logging import log


@dataclass(frozen=True)
class EnvironmentVariables:
    API_KEY: str
    BASE_URL: str
    MODEL: str

    def as_environ(self) -> Dict[str, str]:
        return {
            EnvVar.API_KEY.value: self.API_KEY,
            EnvVar.BASE_URL.value: self.BASE_URL,
            EnvVar.MODEL.value: self.MODEL,
        }

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def _env(environ: Optional[MutableMapping[str, str]]) -> MutableMapping[str, str]:
    return os.environ if environ is None else environ


def apply_environment_variables(env_vars: EnvironmentVariables,
                                environ: Optional[MutableMapping[str, str]] = None) -> None:
    """Write the triple. Not atomic: the three keys are set one at a time."""
    target = _env(environ)
    for key, value in env_vars.as_environ().items():
        target[key] = value
    log("DEBUG", "env", "environment applied", base_url=env_vars.BASE_URL, model=env_vars.MODEL)


def get_current_environment_variables(environ: Optional[MutableMapping[str, str]] = None) -> Dict[str, str]:
    """Only the variables that are actually present."""
    source = _env(environ)
    return {var.value: source[var.value] for var in REQUIRED_ENV_VARS if var.value in source}


def validate_environment_variables(environ: Optional[MutableMapping[str, str]] = None) -> ValidationResult:
    result = ValidationResult()
    source = _env(environ)

    api_key = source.get(EnvVar.API_KEY.value)
    base_url = source.get(EnvVar.BASE_URL.value)
    model = source.get(EnvVar.MODEL.value)

    for var, value in ((EnvVar.API_KEY, api_key), (EnvVar.BASE_URL, base_url), (EnvVar.MODEL, model)):
        if value is None or value == "":
            result.error(f"Missing required environment variable: {var.value}")
        elif not value.strip():
            result.error(f"Environment variable {var.value} cannot be empty")
        elif var is EnvVar.BASE_URL and not is_valid_url(value):
            result.error(f"Environment variable {var.value} is not a valid URL: {value}")

    if api_key and len(api_key) < DEFAULTS["MIN_API_KEY_LENGTH"]:
        result.warn(f"{EnvVar.API_KEY.value} seems unusually short, please verify it's correct")

    if base_url and not base_url.startswith("https://"):
        result.warn(f"{EnvVar.BASE_URL.value} does not use HTTPS, which may not be secure")

    return result


def get_required_environment_variables(environ: Optional[MutableMapping[str, str]] = None) -> EnvironmentVariables:
    """Raises ValueError when any of the three variables is missing or invalid."""
    validation = validate_environment_variables(environ)
    if not validation.is_valid:
        raise ValueError(f"Missing required environment variables: {', '.join(validation.errors)}")
    source = _env(environ)
    return EnvironmentVariables(
        API_KEY=source[EnvVar.API_KEY.value],
        BASE_URL=source[EnvVar.BASE_URL.value],
        MODEL=source[EnvVar.MODEL.value],
    )


def clear_environment_variables(environ: Optional[MutableMapping[str, str]] = None) -> None:
    target = _env(environ)
    for var in REQUIRED_ENV_VARS:
        target.pop(var.value, None)


def backup_environment_variables(environ: Optional[MutableMapping[str, str]] = None) -> Dict[str, str]:
    return get_current_environment_variables(environ)


def restore_environment_variables(backup: Dict[str, str],
                                  environ: Optional[MutableMapping[str, str]] = None) -> None:
    clear_environment_variables(environ)
    target = _env(environ)
    for key, value in backup.items():
        target[key] = value


def are_environment_variables_set(environ: Optional[MutableMapping[str, str]] = None) -> bool:
    return validate_environment_variables(environ).is_valid


def get_environment_variable_status(environ: Optional[MutableMapping[str, str]] = None) -> Dict[str, Dict[str, object]]:
    """Per-variable status for display; the API key value is masked."""
    source = _env(environ)
    status: Dict[str, Dict[str, object]] = {}
    for label, var in (("api_key", EnvVar.API_KEY), ("base_url", EnvVar.BASE_URL), ("model", EnvVar.MODEL)):
        value = source.get(var.value)
        entry: Dict[str, object] = {
            "name": var.value,
            "is_set": value is not None,
            "is_empty": not value or not value.strip(),
        }
        if value:
            entry["value"] = mask_secret(value) if var is EnvVar.API_KEY else value
        status[label] = entry
    return status
