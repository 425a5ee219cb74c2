from dataclasses import dataclass, field
from typing import Generic, TypeVar, Optional, Dict, Any, List

T = TypeVar("T")

@dataclass
class ErrorInfo:
    code: str         # e.g., "config.not_found", "config.parse_failed"
    message: str
    detail: Optional[Dict[str, Any]] = None

@dataclass
class Result(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error: Optional[ErrorInfo] = None

@dataclass
class ValidationResult:
    is_valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def extend(self, other: "ValidationResult") -> None:
        """Fold another result's messages into this one."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        self.is_valid = not self.errors

    def error(self, message: str) -> None:
        self.errors.append(message)
        self.is_valid = False

    def warn(self, message: str) -> None:
        self.warnings.append(message)

@dataclass
class CommandResult:
    success: bool
    message: str
    details: Optional[str] = None
    exit_code: int = 0
