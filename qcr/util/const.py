from enum import Enum, IntEnum

class EnvVar(str, Enum):
    API_KEY = "OPENAI_API_KEY"
    BASE_URL = "OPENAI_BASE_URL"
    MODEL = "OPENAI_MODEL"

REQUIRED_ENV_VARS = (EnvVar.API_KEY, EnvVar.BASE_URL, EnvVar.MODEL)

class ExitCode(IntEnum):
    SUCCESS = 0
    GENERAL_ERROR = 1
    INVALID_USAGE = 2
    CONFIG_NOT_FOUND = 3
    CONFIG_INVALID = 4
    CONFIG_VALIDATION_FAILED = 5
    ENVIRONMENT_ERROR = 6
    COMMAND_NOT_FOUND = 127
    INTERRUPTED = 130

class StartupStep(str, Enum):
    CHECKING_CONFIG_FILE = "checking_config_file"
    CHECKING_DEFAULT_CONFIG = "checking_default_config"
    VALIDATING_DEFAULT_CONFIG = "validating_default_config"
    SETTING_ENVIRONMENT = "setting_environment"
    READY = "ready"
    FAILED = "failed"

CONFIG_FILE_NAMES = {
    "yaml": ["config.yaml", "config.yml"],
    "json": ["config.json"],
}

USER_CONFIG_DIR = ".qcr"

DEFAULTS = {
    "QWEN_COMMAND": "qwen",
    "MIN_API_KEY_LENGTH": 10,
    "API_KEY_MASK_CHARS": 8,
    "LOG_LEVEL": "WARN",
}
