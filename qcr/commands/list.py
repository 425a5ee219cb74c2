from typing import List, Optional

from .utils import load_config_for_command
from ..errors import create_error_result, create_success_result, provider_not_found_error
from ..providers.registry import BUILT_IN_PROVIDERS
from ..resolver import find_provider_by_name, get_all_provider_names, get_current_default_configuration
from ..util.types import CommandResult


def list_config_command(cwd: Optional[str] = None, verbose: bool = False) -> CommandResult:
    loaded = load_config_for_command(cwd)
    if isinstance(loaded, CommandResult):
        return loaded
    config = loaded.config
    default = get_current_default_configuration(config)

    lines: List[str] = []
    for group in config.configs:
        if verbose and group.config_name:
            lines.append(f"[{group.config_name}]")
        for entry in group.config:
            marker = "*" if entry.name == default else " "
            line = f"{marker} {entry.name}"
            if verbose:
                line += f" ({entry.provider}/{entry.model})"
            lines.append(line)

    if not lines:
        return create_success_result("No configurations defined", f"Configuration file: {loaded.file_path}")

    details = "\n".join(lines)
    if verbose:
        details += f"\n\nConfiguration file: {loaded.file_path}"
        details += f"\nDefault configuration: {default or '(none)'}"
    return create_success_result("Available configurations:", details)


def _built_in_listing(provider_name: Optional[str]) -> CommandResult:
    if provider_name:
        built_in = BUILT_IN_PROVIDERS.get(provider_name.lower())
        if built_in is None:
            return create_error_result(provider_not_found_error(provider_name, list(BUILT_IN_PROVIDERS)))
        details = "\n".join(f"  - {m}" for m in built_in.models)
        return create_success_result(f"Models for built-in provider {built_in.display_name} ({built_in.key}):",
                                     details)

    lines = []
    for built_in in BUILT_IN_PROVIDERS.values():
        lines.append(f"{built_in.key} ({built_in.display_name})")
        lines.extend(f"  - {m}" for m in built_in.models)
    return create_success_result("Built-in providers:", "\n".join(lines))


def list_provider_command(provider_name: Optional[str] = None, cwd: Optional[str] = None,
                          show_all: bool = False, built_in: bool = False) -> CommandResult:
    """Configured providers by default; `built_in` lists the registry instead."""
    if built_in:
        return _built_in_listing(provider_name)

    loaded = load_config_for_command(cwd)
    if isinstance(loaded, CommandResult):
        return loaded
    config = loaded.config

    if provider_name:
        provider = find_provider_by_name(provider_name, config)
        if provider is None:
            return create_error_result(provider_not_found_error(provider_name, get_all_provider_names(config)))
        details = "\n".join(f"  - {m}" for m in provider.model_names) or "  (no models)"
        return create_success_result(f"Models for provider {provider.provider}:", details)

    lines = []
    for provider in config.providers:
        lines.append(provider.provider)
        if show_all:
            lines.extend(f"  - {m}" for m in provider.model_names)
    if not lines:
        return create_success_result("No providers defined", f"Configuration file: {loaded.file_path}")
    return create_success_result("Configured providers:", "\n".join(lines))
