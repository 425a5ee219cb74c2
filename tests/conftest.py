"""Pytest configuration for qcr tests."""

import copy
import json
import os

import pytest
import yaml

from qcr.config.loader import LoadedConfig
from qcr.config.schema import ConfigFile
from qcr.util.types import ValidationResult

_ISOLATED_VARS = (
    "OPENAI_API_KEY", "OPENAI_BASE_URL", "OPENAI_MODEL",
    "AZURE_API_KEY", "ANTHROPIC_API_KEY", "GOOGLE_API_KEY", "AZURE_RESOURCE_NAME",
    "QCR_QWEN_COMMAND", "QCR_LOG_LEVEL", "QCR_LOG_FORMAT", "QCR_SECRETS_PATTERNS",
)

SAMPLE_DOCUMENT = {
    "default_config": [{"name": "a"}],
    "configs": [
        {"config_name": "main", "config": [
            {"name": "a", "provider": "p", "model": "m"},
            {"name": "b", "provider": "openai", "model": "gpt-4"},
        ]},
    ],
    "providers": [
        {"provider": "p", "env": {"api_key": "k-1234567890", "base_url": "https://x/v1",
                                  "models": [{"model": "m"}]}},
        {"provider": "openai", "env": {"api_key": "sk-test-1234567890", "base_url": "https://api.openai.com/v1",
                                       "models": [{"model": "gpt-4"}, {"model": "gpt-3.5-turbo"}]}},
    ],
}


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Private HOME and working directory, and none of the variables qcr reads."""
    saved = dict(os.environ)
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    for var in _ISOLATED_VARS:
        os.environ.pop(var, None)
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    yield work
    os.environ.clear()
    os.environ.update(saved)


@pytest.fixture
def document():
    return copy.deepcopy(SAMPLE_DOCUMENT)


@pytest.fixture
def config_file(document):
    return ConfigFile.from_document(document)


@pytest.fixture
def write_config(isolated_env):
    """Write a document into the working directory (or `directory`) and return its path."""
    def _write(data, name="config.yaml", directory=None):
        target = (directory or isolated_env) / name
        target.parent.mkdir(parents=True, exist_ok=True)
        if name.endswith(".json"):
            target.write_text(json.dumps(data), encoding="utf-8")
        else:
            target.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
        return target
    return _write


def stub_loader(data, valid=True, file_path="/virtual/config.yaml"):
    """Loader returning `data` as if discovered, bypassing the file system."""
    def _load(cwd=None):
        validation = ValidationResult()
        if not valid:
            validation.error("configs[0]: config array cannot be empty")
        return LoadedConfig(config=ConfigFile.from_document(data), validation=validation,
                            file_path=file_path, raw=data)
    return _load


def raising_loader(exc):
    def _load(cwd=None):
        raise exc
    return _load
