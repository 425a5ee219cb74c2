"""Secrets redaction for log records and masked display of API keys."""

import os
import re
from typing import Any, List, Optional

from .const import DEFAULTS


class SecretsRedactor:
    """Redact provider credentials from text using configurable regex patterns."""

    def __init__(self, patterns: Optional[List[str]] = None) -> None:
        if patterns is None:
            patterns = self._load_default_patterns()

        self.patterns = [re.compile(pattern, re.IGNORECASE) for pattern in patterns]

    def _load_default_patterns(self) -> List[str]:
        """Load redaction patterns from QCR_SECRETS_PATTERNS or use defaults."""
        env_patterns = os.environ.get("QCR_SECRETS_PATTERNS")
        if env_patterns:
            return [p.strip() for p in env_patterns.split(",") if p.strip()]

        return [
            # key=value style assignments
            r'(api[_-]?key|token|secret|password|auth)[\s]*[=:]\s*["\']?[a-zA-Z0-9\-_]{16,}["\']?',

            # OpenAI / Anthropic style keys
            r'\bsk-(ant-)?[a-zA-Z0-9\-_]{16,}',

            # Google API keys
            r'\bAIza[0-9A-Za-z\-_]{30,}',

            # Bearer headers
            r'bearer\s+[a-zA-Z0-9\-_.=]{16,}',

            # JWT tokens
            r'eyJ[a-zA-Z0-9\-_]+\.[a-zA-Z0-9\-_]+\.[a-zA-Z0-9\-_]+',
        ]

    def redact(self, text: str, replacement: str = "***REDACTED***") -> str:
        if not text:
            return text

        redacted = text
        for pattern in self.patterns:
            redacted = pattern.sub(replacement, redacted)
        return redacted

    def redact_value(self, value: Any, replacement: str = "***REDACTED***") -> Any:
        if isinstance(value, str):
            return self.redact(value, replacement)
        if isinstance(value, dict):
            return self.redact_dict(value, replacement)
        if isinstance(value, (list, tuple)):
            return [self.redact_value(item, replacement) for item in value]
        return value

    def redact_dict(self, data: dict, replacement: str = "***REDACTED***") -> dict:
        """Redact values; keys that name a credential are blanked outright."""
        if not data:
            return data

        redacted = {}
        for key, value in data.items():
            if isinstance(value, str) and _is_secret_key(key):
                redacted[key] = replacement
            else:
                redacted[key] = self.redact_value(value, replacement)
        return redacted


def _is_secret_key(key: Any) -> bool:
    k = str(key).lower()
    return k.endswith("api_key") or k.endswith("apikey") or k in ("token", "secret", "password")


_redactor: Optional[SecretsRedactor] = None


def get_redactor() -> SecretsRedactor:
    global _redactor
    if _redactor is None:
        _redactor = SecretsRedactor()
    return _redactor


def redact(text: str, replacement: str = "***REDACTED***") -> str:
    return get_redactor().redact(text, replacement)


def redact_dict(data: dict, replacement: str = "***REDACTED***") -> dict:
    return get_redactor().redact_dict(data, replacement)


def mask_secret(value: Optional[str], visible: int = DEFAULTS["API_KEY_MASK_CHARS"]) -> str:
    """Show only the first `visible` characters of a credential."""
    if not value:
        return ""
    return f"{value[:visible]}..."
