"""Tests for configuration resolution."""

import os

from qcr.config.schema import ConfigFile
from qcr.resolver import (
    find_configuration_by_name, find_provider_by_name, get_all_configuration_names, get_all_provider_names,
    get_current_default_configuration, get_models_for_built_in_provider, get_models_for_provider,
    is_built_in_provider, resolve_configuration_by_name, resolve_configuration_by_provider_model,
    resolve_default_configuration, set_default_configuration, validate_configuration_resolution,
    validate_provider_model_resolution,
)

MINIMAL = {
    "configs": [{"config": [{"name": "a", "provider": "p", "model": "m"}]}],
    "providers": [{"provider": "p", "env": {"api_key": "k", "base_url": "https://x/v1", "models": [{"model": "m"}]}}],
}


class TestResolveByName:

    def test_resolves_triple(self):
        environ = {}
        result = resolve_configuration_by_name("a", ConfigFile.from_document(MINIMAL), environ=environ)
        assert result.success
        assert result.environment_variables.to_dict() == {"API_KEY": "k", "BASE_URL": "https://x/v1", "MODEL": "m"}
        assert not result.used_built_in_provider
        assert environ == {"OPENAI_API_KEY": "k", "OPENAI_BASE_URL": "https://x/v1", "OPENAI_MODEL": "m"}

    def test_unknown_name_lists_available(self):
        result = resolve_configuration_by_name("b", ConfigFile.from_document(MINIMAL), environ={})
        assert not result.success
        assert "Available configurations: a" in result.error

    def test_writes_process_environment_by_default(self):
        result = resolve_configuration_by_name("a", ConfigFile.from_document(MINIMAL))
        assert result.success
        assert os.environ["OPENAI_MODEL"] == "m"

    def test_apply_false_never_mutates(self):
        environ = {"OPENAI_MODEL": "before"}
        result = resolve_configuration_by_name("a", ConfigFile.from_document(MINIMAL), apply=False, environ=environ)
        assert result.success
        assert environ == {"OPENAI_MODEL": "before"}

    def test_provider_lookup_is_exact(self, document):
        document["configs"][0]["config"][0]["provider"] = "P"
        result = resolve_configuration_by_name("a", ConfigFile.from_document(document), environ={})
        assert not result.success
        assert 'Provider "P" not found' in result.error
        assert "Available configurations: a, b" in result.error

    def test_unsupported_model(self, document):
        document["configs"][0]["config"][0]["model"] = "other"
        result = resolve_configuration_by_name("a", ConfigFile.from_document(document), environ={})
        assert not result.success
        assert 'Model "other" is not supported by provider "p"' in result.error
        assert "Supported models: m" in result.error

    def test_no_document(self):
        assert not resolve_configuration_by_name("a", None, environ={}).success

    def test_idempotent(self, config_file):
        environ = {}
        first = resolve_configuration_by_name("b", config_file, environ=environ)
        second = resolve_configuration_by_name("b", config_file, environ=environ)
        assert first.environment_variables == second.environment_variables


class TestDefaultConfiguration:

    def test_resolves_first_default(self, config_file):
        config_file.default_config.append(config_file.default_config[0].model_copy(update={"name": "b"}))
        result = resolve_default_configuration(config_file, environ={})
        assert result.success
        assert result.config_entry.name == "a"

    def test_missing_default(self, document):
        del document["default_config"]
        result = resolve_default_configuration(ConfigFile.from_document(document), environ={})
        assert not result.success
        assert "No default configuration" in result.error

    def test_set_default(self, config_file):
        outcome = set_default_configuration("b", config_file)
        assert outcome.is_valid
        assert [d.name for d in config_file.default_config] == ["b"]
        assert get_current_default_configuration(config_file) == "b"

    def test_set_unknown_default_leaves_document(self, config_file):
        outcome = set_default_configuration("zz", config_file)
        assert not outcome.is_valid
        assert "Available configurations: a, b" in outcome.errors[0]
        assert get_current_default_configuration(config_file) == "a"


class TestResolveByProviderModel:

    def test_declared_provider_case_insensitive(self, config_file):
        lower = resolve_configuration_by_provider_model("openai", "gpt-4", config_file, environ={})
        mixed = resolve_configuration_by_provider_model("OpenAI", "GPT-4", config_file, environ={})
        assert lower.success and mixed.success
        assert lower.environment_variables.MODEL == "gpt-4"
        assert mixed.environment_variables.MODEL == "gpt-4"
        assert mixed.config_entry.name == "openai-gpt-4"
        assert not mixed.used_built_in_provider
        assert mixed.environment_variables.API_KEY == "sk-test-1234567890"

    def test_built_in_fallback(self, config_file):
        environ = {"GOOGLE_API_KEY": "g-key-1234567890"}
        result = resolve_configuration_by_provider_model("google", "gemini-pro", config_file, environ=environ)
        assert result.success
        assert result.used_built_in_provider
        assert result.environment_variables.API_KEY == "g-key-1234567890"
        assert result.environment_variables.BASE_URL == "https://generativelanguage.googleapis.com/v1"
        assert environ["OPENAI_MODEL"] == "gemini-pro"

    def test_built_in_without_document(self):
        environ = {"OPENAI_API_KEY": "generic-key-123"}
        result = resolve_configuration_by_provider_model("Anthropic", "CLAUDE-3-OPUS", environ=environ)
        assert result.success
        assert result.environment_variables.MODEL == "claude-3-opus"
        assert result.environment_variables.API_KEY == "generic-key-123"

    def test_built_in_missing_key(self):
        result = resolve_configuration_by_provider_model("google", "gemini-pro", environ={})
        assert not result.success
        assert result.error == ('API key not found for provider "google". '
                                "Please set GOOGLE_API_KEY or OPENAI_API_KEY environment variable.")

    def test_declared_provider_falls_through_to_built_in(self, config_file):
        environ = {"OPENAI_API_KEY": "env-key-1234567890"}
        result = resolve_configuration_by_provider_model("openai", "gpt-4-turbo", config_file, environ=environ)
        assert result.success
        assert result.used_built_in_provider
        assert result.environment_variables.API_KEY == "env-key-1234567890"

    def test_unknown_provider(self, config_file):
        result = resolve_configuration_by_provider_model("mystery", "m", config_file, environ={})
        assert not result.success
        assert 'Provider "mystery" not found' in result.error
        assert "p" in result.error and "google" in result.error

    def test_unsupported_model_everywhere(self, config_file):
        result = resolve_configuration_by_provider_model("p", "zzz", config_file, environ={})
        assert not result.success
        assert "Supported models: m" in result.error

    def test_azure_uses_resource_name(self):
        environ = {"AZURE_API_KEY": "azure-key-123", "AZURE_RESOURCE_NAME": "contoso"}
        result = resolve_configuration_by_provider_model("azure", "gpt-4", environ=environ)
        assert result.environment_variables.BASE_URL == "https://contoso.openai.azure.com/openai"


class TestQueries:

    def test_helpers(self, config_file):
        assert find_configuration_by_name("b", config_file).model == "gpt-4"
        assert find_provider_by_name("OPENAI", config_file).provider == "openai"
        assert get_all_configuration_names(config_file) == ["a", "b"]
        assert get_all_provider_names(config_file) == ["p", "openai"]
        assert get_models_for_provider("OpenAI", config_file) == ["gpt-4", "gpt-3.5-turbo"]
        assert get_models_for_provider("ghost", config_file) is None
        assert "gemini-pro" in get_models_for_built_in_provider("GOOGLE")
        assert get_models_for_built_in_provider("ghost") is None
        assert is_built_in_provider("Azure")
        assert not is_built_in_provider("p")


class TestPreviews:

    def test_configuration_preview(self, config_file):
        before = dict(os.environ)
        assert validate_configuration_resolution("a", config_file).is_valid
        assert dict(os.environ) == before

    def test_configuration_preview_reports_problems(self, document):
        document["providers"][0]["env"]["api_key"] = ""
        document["providers"][0]["env"]["base_url"] = "http://x"
        result = validate_configuration_resolution("a", ConfigFile.from_document(document))
        assert result.errors == ['Provider "p" is missing API key']
        assert 'Base URL for provider "p" does not use HTTPS' in result.warnings

    def test_provider_model_preview(self, config_file):
        environ = {}
        result = validate_provider_model_resolution("google", "gemini-pro", config_file, environ=environ)
        assert not result.is_valid
        assert environ == {}

        environ = {"GOOGLE_API_KEY": "g-key-1234567890"}
        assert validate_provider_model_resolution("google", "gemini-pro", config_file, environ=environ).is_valid
        assert "OPENAI_MODEL" not in environ

        assert validate_provider_model_resolution("OpenAI", "GPT-4", config_file, environ={}).is_valid

    def test_provider_model_preview_checks_url_syntax(self, document):
        document["providers"][1]["env"]["base_url"] = "not a url"
        result = validate_provider_model_resolution("openai", "gpt-4", ConfigFile.from_document(document), environ={})
        assert result.errors == ['Configured provider "openai" has invalid base URL: not a url']
