import json
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union
from pydantic import ValidationError
from .schema import ConfigFile
from .validation import validate_config_file
from .discovery import ConfigDiscovery
from ..errors import ConfigLoadError, ConfigNotFoundError
from ..util.types import ValidationResult
from ..util.logging import log

@dataclass
class LoadedConfig:
    config: Optional[ConfigFile]    # None when the document cannot be typed
    validation: ValidationResult
    file_path: str
    raw: Any

def detect_config_file_format(file_path: str) -> str:
    """By extension; unknown extensions are treated as YAML."""
    return "json" if Path(file_path).suffix.lower() == ".json" else "yaml"

def _check_root(parsed: Any, file_path: str, kind: str) -> Dict[str, Any]:
    if parsed is None:
        raise ConfigLoadError(f"{kind} parsing error in {file_path}: Configuration file is empty or contains only comments", file_path)
    if not isinstance(parsed, dict):
        raise ConfigLoadError(f"{kind} parsing error in {file_path}: Configuration file must contain an object at the root level", file_path)
    return parsed

def parse_yaml_config(content: str, file_path: str) -> Dict[str, Any]:
    try:
        parsed = yaml.safe_load(content)
    except yaml.YAMLError as e:
        mark = getattr(e, "problem_mark", None)
        where = f" at line {mark.line + 1}" if mark is not None else ""
        raise ConfigLoadError(f"YAML parsing error in {file_path}{where}: {e}", file_path) from e
    return _check_root(parsed, file_path, "YAML")

def parse_json_config(content: str, file_path: str) -> Dict[str, Any]:
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigLoadError(f"JSON parsing error in {file_path} at line {e.lineno}: {e.msg}", file_path) from e
    return _check_root(parsed, file_path, "JSON")

def load_config_file(file_path: str, fmt: Optional[str] = None) -> Dict[str, Any]:
    """Read and parse one file into its raw mapping."""
    path = Path(file_path)
    if not path.is_file():
        raise ConfigLoadError(f"Configuration file not found: {file_path}", file_path)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigLoadError(f'Failed to load configuration file "{file_path}": {e}', file_path) from e

    fmt = fmt or detect_config_file_format(file_path)
    if fmt == "json":
        return parse_json_config(content, file_path)
    return parse_yaml_config(content, file_path)

def type_config_file(raw: Any) -> Tuple[Optional[ConfigFile], List[str]]:
    """Typed document, or None plus one message per schema violation."""
    try:
        return ConfigFile.from_document(raw), []
    except ValidationError as e:
        log("DEBUG", "config.loader", "document not typeable", error=str(e))
        return None, [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()]
    except TypeError as e:
        log("DEBUG", "config.loader", "document not typeable", error=str(e))
        return None, [str(e)]

def load_and_validate_config_file(file_path: str, fmt: Optional[str] = None) -> LoadedConfig:
    raw = load_config_file(file_path, fmt)
    validation = validate_config_file(raw)
    config, schema_errors = type_config_file(raw)
    # the validator passed something the typed model cannot hold; surface why
    if config is None and validation.is_valid:
        for message in schema_errors or ["Configuration document does not match the expected schema"]:
            validation.error(message)
    return LoadedConfig(config=config, validation=validation, file_path=file_path, raw=raw)

def discover_and_load_config(cwd: Optional[str] = None) -> LoadedConfig:
    """Raises ConfigNotFoundError when no file exists, ConfigLoadError on read/parse failure."""
    discovery = ConfigDiscovery(cwd)
    found = discovery.discover()
    if not found.ok:
        raise ConfigLoadError(found.error.message)
    if found.value is None:
        raise ConfigNotFoundError(discovery.search_dirs())

    log("DEBUG", "config.loader", "configuration file discovered", file_path=found.value.file_path)
    loaded = load_and_validate_config_file(found.value.file_path, found.value.format)
    if not loaded.validation.is_valid:
        log("INFO", "config.loader", "configuration file invalid", file_path=loaded.file_path,
            errors=loaded.validation.errors)
    return loaded

def save_config_file(config: Union[ConfigFile, Dict[str, Any]], file_path: str) -> None:
    """Write YAML or JSON depending on the file extension."""
    data = config.to_document() if isinstance(config, ConfigFile) else config
    path = Path(file_path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)

    try:
        if detect_config_file_format(file_path) == "json":
            path.write_text(json.dumps(data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        else:
            path.write_text(yaml.safe_dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True),
                            encoding="utf-8")
    except OSError as e:
        raise ConfigLoadError(f'Failed to save configuration file "{file_path}": {e}', file_path) from e
    log("INFO", "config.loader", "configuration file saved", file_path=file_path)
