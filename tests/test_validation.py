"""Tests for structural and cross-reference validation."""

from qcr.config.validation import (
    validate_config, validate_config_entry, validate_config_file, validate_configuration_by_name,
    validate_default_config, validate_model_entry, validate_provider, validate_provider_env,
    validate_provider_model_cross_references, validate_unique_config_names, validate_unique_provider_names,
)


def test_sample_document_is_valid(document):
    result = validate_config_file(document)
    assert result.is_valid, result.errors
    assert result.errors == []


def test_typed_document_is_accepted(config_file):
    assert validate_config_file(config_file).is_valid


def test_null_document():
    result = validate_config_file(None)
    assert not result.is_valid
    assert result.errors == ["Configuration file is null or undefined"]


def test_missing_top_level_arrays():
    result = validate_config_file({})
    assert 'Missing or invalid "configs" array' in result.errors
    assert 'Missing or invalid "providers" array' in result.errors


def test_default_config_names_nonexistent_entry(document):
    document["default_config"] = [{"name": "z"}]
    result = validate_default_config(document["default_config"], document["configs"])
    assert not result.is_valid
    assert any('"z"' in e and "does not exist" in e for e in result.errors)


def test_default_config_extras_are_a_warning(document):
    result = validate_default_config([{"name": "a"}, {"name": "b"}], document["configs"])
    assert result.is_valid
    assert result.warnings == ["Multiple default configurations found, only the first will be used"]


def test_default_config_shapes():
    assert validate_default_config([], []).warnings == ["default_config array is empty"]
    assert not validate_default_config("a", []).is_valid
    assert not validate_default_config([{"name": ""}], []).is_valid
    assert not validate_default_config([None], []).is_valid


def test_null_entries_are_reported_not_raised():
    result = validate_config({"config": [None, {"name": "a", "provider": "p", "model": "m"}]}, 0)
    assert result.errors == ["configs[0].config[0]: Configuration entry is null or undefined"]

    assert validate_config(None, 3).errors == ["configs[3]: Configuration is null or undefined"]
    assert validate_provider(None, 1).errors == ["providers[1]: Provider is null or undefined"]
    assert validate_model_entry(None, "x").errors == ["x: Model entry is null or undefined"]
    assert validate_provider_env(None, "x").errors == ["x: Provider environment is null or undefined"]


def test_empty_config_group_is_an_error():
    result = validate_config({"config": []}, 0)
    assert result.errors == ["configs[0]: config array cannot be empty"]


def test_entry_fields():
    result = validate_config_entry({"name": "", "provider": 3}, "e")
    assert result.errors == [
        "e: name cannot be empty",
        "e: provider must be a string",
        "e: model must be a string",
    ]


def test_provider_env_checks():
    result = validate_provider_env({"api_key": "", "base_url": "nope", "models": []}, "env")
    assert "env: api_key cannot be empty" in result.errors
    assert "env: base_url is not a valid URL format" in result.errors
    assert result.warnings == ["env: models array is empty"]


def test_empty_models_list_is_only_a_warning():
    result = validate_provider({"provider": "p", "env": {"api_key": "k", "base_url": "https://x", "models": []}}, 0)
    assert result.is_valid
    assert result.warnings


def test_duplicate_models_warn():
    env = {"api_key": "k", "base_url": "https://x", "models": [{"model": "m"}, {"model": "m"}]}
    result = validate_provider_env(env, "env")
    assert result.is_valid
    assert result.warnings == ["env: Duplicate model names found: m"]


def test_missing_env_object():
    result = validate_provider({"provider": "p"}, 2)
    assert result.errors == ["providers[2]: env object is required"]


def test_cross_references(document):
    document["configs"][0]["config"].append({"name": "c", "provider": "ghost", "model": "m"})
    document["configs"][0]["config"].append({"name": "d", "provider": "p", "model": "nope"})
    result = validate_provider_model_cross_references(document["configs"], document["providers"])
    assert result.errors == [
        'configs[0].config[2]: Provider "ghost" not found in providers array',
        'configs[0].config[3]: Model "nope" not found in provider "p" models list',
    ]


def test_validation_is_exhaustive(document):
    document["configs"][0]["config"][0]["provider"] = "ghost"
    document["providers"][1]["env"]["api_key"] = ""
    document["configs"].append({"config": [None]})
    result = validate_config_file(document)
    assert not result.is_valid
    assert len(result.errors) == 3


def test_duplicate_names_reported_once_across_groups():
    configs = [
        {"config": [{"name": "a"}, {"name": "a"}]},
        {"config": [{"name": "a"}, {"name": "b"}]},
        {"config": [{"name": "b"}]},
    ]
    result = validate_unique_config_names(configs)
    assert result.errors == ["Duplicate configuration names found: a, b"]


def test_duplicate_provider_names():
    result = validate_unique_provider_names([{"provider": "p"}, {"provider": "q"}, {"provider": "p"}])
    assert result.errors == ["Duplicate provider names found: p"]


def test_accepted_documents_are_closed(document):
    """An accepted document never has a dangling provider or model reference."""
    assert validate_config_file(document).is_valid
    providers = {p["provider"]: p for p in document["providers"]}
    for group in document["configs"]:
        for entry in group["config"]:
            assert entry["provider"] in providers
            assert entry["model"] in [m["model"] for m in providers[entry["provider"]]["env"]["models"]]


def test_validate_configuration_by_name(document):
    assert validate_configuration_by_name("a", document).is_valid

    missing = validate_configuration_by_name("zz", document)
    assert missing.errors == ['Configuration "zz" not found', "Available configurations: a, b"]


def test_validate_configuration_by_name_scopes_to_its_group(document):
    document["configs"].append({"config": [{"name": "c", "provider": "ghost", "model": "m"}]})
    assert validate_configuration_by_name("a", document).is_valid
    result = validate_configuration_by_name("c", document)
    assert result.errors == ['configs[1].config[0]: Provider "ghost" not found in providers array']


def test_group_name_must_be_a_string():
    result = validate_config({"config_name": 5, "config": [{"name": "a", "provider": "p", "model": "m"}]}, 1)
    assert result.errors == ["configs[1]: config_name must be a string"]
    assert validate_config({"config_name": None, "config": [{"name": "a", "provider": "p", "model": "m"}]}, 1).is_valid
