"""qcr - switch between named LLM provider configurations before launching Qwen Code."""

__version__ = "0.1.0"
