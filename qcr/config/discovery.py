from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from ..util.const import CONFIG_FILE_NAMES, USER_CONFIG_DIR
from ..util.types import Result, ErrorInfo

@dataclass
class DiscoveredFile:
    file_path: str
    format: str   # "yaml" | "json"

def discover_config_file(directory: str) -> Optional[DiscoveredFile]:
    """First config file in `directory`; YAML names are preferred over JSON."""
    base = Path(directory)
    for fmt in ("yaml", "json"):
        for name in CONFIG_FILE_NAMES[fmt]:
            candidate = base / name
            if candidate.is_file():
                return DiscoveredFile(str(candidate), fmt)
    return None

class ConfigDiscovery:
    def __init__(self, start_cwd: Optional[str] = None) -> None:
        self.start_cwd = Path(start_cwd).resolve() if start_cwd else Path.cwd()

    def search_dirs(self) -> List[str]:
        """Directories searched, highest priority first: CWD, then ~/.qcr."""
        return [str(self.start_cwd), str(Path.home() / USER_CONFIG_DIR)]

    def potential_paths(self) -> List[str]:
        names = CONFIG_FILE_NAMES["yaml"] + CONFIG_FILE_NAMES["json"]
        return [str(Path(d) / n) for d in self.search_dirs() for n in names]

    def discover(self) -> Result[Optional[DiscoveredFile]]:
        """Ok with value None when nothing was found."""
        try:
            for directory in self.search_dirs():
                if Path(directory).is_dir():
                    found = discover_config_file(directory)
                    if found:
                        return Result(ok=True, value=found)
            return Result(ok=True, value=None)
        except OSError as e:
            return Result(ok=False, error=ErrorInfo("discovery.failed", str(e)))

def discover_config_file_hierarchical(current_dir: Optional[str] = None) -> Optional[DiscoveredFile]:
    res = ConfigDiscovery(current_dir).discover()
    return res.value if res.ok else None

def list_potential_config_paths(current_dir: Optional[str] = None) -> List[str]:
    return ConfigDiscovery(current_dir).potential_paths()
