"""Tests for the qcr command line."""

import os
import shutil

import pytest
import yaml
from typer.testing import CliRunner

from qcr.cli import app

runner = CliRunner()


class TestConfigCommands:

    def test_list_config_marks_default(self, write_config, document):
        write_config(document)
        result = runner.invoke(app, ["list", "config"])
        assert result.exit_code == 0
        assert "* a" in result.output
        assert "  b" in result.output

    def test_list_config_verbose_shows_groups(self, write_config, document):
        write_config(document)
        result = runner.invoke(app, ["list", "config", "-v"])
        assert result.exit_code == 0
        assert "[main]" in result.output
        assert "(openai/gpt-4)" in result.output

    def test_missing_file_exit_code(self):
        result = runner.invoke(app, ["list", "config"])
        assert result.exit_code == 3
        assert "Configuration file not found" in result.output

    def test_invalid_file_exit_code(self, write_config, document):
        document["configs"][0]["config"][0]["provider"] = "ghost"
        write_config(document)
        result = runner.invoke(app, ["use", "a"])
        assert result.exit_code == 5
        assert 'Provider "ghost" not found' in result.output

    def test_list_provider(self, write_config, document):
        write_config(document)
        result = runner.invoke(app, ["list", "provider", "--all"])
        assert result.exit_code == 0
        assert "gpt-3.5-turbo" in result.output

        result = runner.invoke(app, ["list", "provider", "ghost"])
        assert result.exit_code == 4

    def test_list_builtin_providers_without_file(self):
        result = runner.invoke(app, ["list", "provider", "--builtin"])
        assert result.exit_code == 0
        assert "google (Google AI)" in result.output

        result = runner.invoke(app, ["list", "provider", "Google", "--builtin"])
        assert result.exit_code == 0
        assert "gemini-pro" in result.output

    def test_set_default_persists(self, write_config, document):
        path = write_config(document)
        result = runner.invoke(app, ["set-default", "b"])
        assert result.exit_code == 0
        assert yaml.safe_load(path.read_text())["default_config"] == [{"name": "b"}]

        result = runner.invoke(app, ["set-default", "zz"])
        assert result.exit_code == 4
        assert yaml.safe_load(path.read_text())["default_config"] == [{"name": "b"}]

    def test_chk_all(self, write_config, document):
        write_config(document)
        result = runner.invoke(app, ["chk"])
        assert result.exit_code == 0
        assert "All configurations are valid" in result.output

    def test_chk_reports_broken_entry(self, write_config, document):
        document["providers"][0]["env"]["base_url"] = "nope"
        write_config(document)
        result = runner.invoke(app, ["chk"])
        assert result.exit_code == 5
        assert "base_url is not a valid URL format" in result.output

        result = runner.invoke(app, ["chk", "b"])
        assert result.exit_code == 0


class TestActivation:

    def test_use_default(self, write_config, document):
        write_config(document)
        result = runner.invoke(app, ["use"])
        assert result.exit_code == 0
        assert "Successfully activated default configuration 'a'" in result.output

    def test_use_export_lines(self, write_config, document):
        write_config(document)
        result = runner.invoke(app, ["use", "b", "--export"])
        assert result.exit_code == 0
        assert "export OPENAI_MODEL=gpt-4" in result.output
        assert "export OPENAI_BASE_URL=https://api.openai.com/v1" in result.output

    def test_use_unknown(self, write_config, document):
        write_config(document)
        result = runner.invoke(app, ["use", "zz"])
        assert result.exit_code == 4
        assert "- a" in result.output

    def test_router_builtin_without_file(self):
        os.environ["GOOGLE_API_KEY"] = "g-key-1234567890"
        result = runner.invoke(app, ["router", "google", "gemini-pro"])
        assert result.exit_code == 0
        assert "built-in provider" in result.output

    def test_router_unsupported_model_lists_models(self):
        result = runner.invoke(app, ["router", "google", "gemini-ultra"])
        assert result.exit_code == 4
        assert "Model 'gemini-ultra' is not supported by provider 'google'" in result.output
        assert "- gemini-pro" in result.output

    def test_router_missing_key(self):
        result = runner.invoke(app, ["router", "google", "gemini-pro"])
        assert result.exit_code == 4
        assert "GOOGLE_API_KEY" in result.output


class TestStartupCommands:

    def test_startup_validate(self, write_config, document):
        write_config(document)
        result = runner.invoke(app, ["startup"])
        assert result.exit_code == 0
        assert "OPENAI_MODEL" not in os.environ

    def test_startup_execute(self, write_config, document):
        write_config(document)
        result = runner.invoke(app, ["startup", "--execute"])
        assert result.exit_code == 0
        assert os.environ["OPENAI_MODEL"] == "m"

    def test_startup_not_found(self):
        result = runner.invoke(app, ["startup"])
        assert result.exit_code == 3
        assert "OPENAI_API_KEY" in result.output

    def test_startup_ready_and_status(self):
        assert runner.invoke(app, ["startup", "--ready"]).exit_code == 1
        result = runner.invoke(app, ["startup", "--status"])
        assert result.exit_code == 3
        assert "Not ready to launch" in result.output

    def test_startup_flags_are_exclusive(self):
        result = runner.invoke(app, ["startup", "--status", "--ready"])
        assert result.exit_code == 2


class TestRun:

    def test_run_missing_command(self):
        os.environ.update({"OPENAI_API_KEY": "sk-1234567890abcdef", "OPENAI_BASE_URL": "https://x/v1",
                           "OPENAI_MODEL": "m", "QCR_QWEN_COMMAND": "qcr-definitely-not-installed"})
        result = runner.invoke(app, ["run"])
        assert result.exit_code == 127
        assert "Failed to launch qcr-definitely-not-installed" in result.output

    def test_run_verbose_prints_launch_summary(self):
        os.environ.update({"OPENAI_API_KEY": "sk-1234567890abcdef", "OPENAI_BASE_URL": "http://localhost:8000/v1",
                           "OPENAI_MODEL": "m", "QCR_QWEN_COMMAND": "qcr-definitely-not-installed"})
        result = runner.invoke(app, ["run", "-v"])
        assert result.exit_code == 127
        assert "Command: qcr-definitely-not-installed" in result.output
        assert "OPENAI_API_KEY: sk-12345..." in result.output
        assert "sk-1234567890abcdef" not in result.output
        assert "OPENAI_MODEL: m" in result.output
        assert "does not use HTTPS" in result.output

    def test_run_quiet_without_verbose(self):
        os.environ.update({"OPENAI_API_KEY": "sk-1234567890abcdef", "OPENAI_BASE_URL": "https://x/v1",
                           "OPENAI_MODEL": "m", "QCR_QWEN_COMMAND": "qcr-definitely-not-installed"})
        result = runner.invoke(app, ["run"])
        assert "Command:" not in result.output

    def test_run_without_configuration(self):
        result = runner.invoke(app, ["run"])
        assert result.exit_code == 3

    @pytest.mark.skipif(shutil.which("true") is None, reason="needs a POSIX `true`")
    def test_run_activates_default_first(self, write_config, document):
        write_config(document)
        os.environ["QCR_QWEN_COMMAND"] = "true"
        result = runner.invoke(app, ["run"])
        assert result.exit_code == 0
        assert os.environ["OPENAI_MODEL"] == "m"
