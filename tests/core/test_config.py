"""Tests for config loading, environment overrides and persistence."""

from pathlib import Path

import pytest

from ghedit.core.config import (
    FilesystemConfigStore,
    GheditConfig,
    InMemoryConfigStore,
    apply_env_overrides,
    config_from_mapping,
    load_config,
)


def test_defaults() -> None:
    config = GheditConfig()

    assert config.repo is None
    assert config.cache_ttl_seconds == 300
    assert config.dispatch_timeout_seconds == 5.0
    assert config.list_limit == 30
    assert config.default_state == "open"
    assert config.delete_confirmation is True


def test_config_from_mapping_coerces_values() -> None:
    config = config_from_mapping(
        {"repo": "owner/repo", "cache_ttl_seconds": "60", "delete_confirmation": "no"},
        "test",
    )

    assert config.repo == "owner/repo"
    assert config.cache_ttl_seconds == 60
    assert config.delete_confirmation is False


def test_config_from_mapping_rejects_unknown_key() -> None:
    with pytest.raises(ValueError, match="Unknown config key 'colour' in test"):
        config_from_mapping({"colour": "red"}, "test")


def test_config_from_mapping_rejects_bad_value() -> None:
    with pytest.raises(ValueError, match="Invalid value 'soon' for 'dispatch_timeout_seconds'"):
        config_from_mapping({"dispatch_timeout_seconds": "soon"}, "test")


def test_env_overrides_file_values() -> None:
    store = InMemoryConfigStore(config=GheditConfig(repo="file/repo", list_limit=50))

    config = load_config(store, {"GHEDIT_REPO": "env/repo", "GHEDIT_CACHE_TTL": "10"})

    assert config.repo == "env/repo"
    assert config.cache_ttl_seconds == 10
    assert config.list_limit == 50


def test_empty_env_values_are_ignored() -> None:
    config = apply_env_overrides(GheditConfig(repo="file/repo"), {"GHEDIT_REPO": ""})

    assert config.repo == "file/repo"


def test_bad_env_value_names_variable() -> None:
    with pytest.raises(ValueError, match=r"\$GHEDIT_LIST_LIMIT"):
        apply_env_overrides(GheditConfig(), {"GHEDIT_LIST_LIMIT": "0"})


def test_filesystem_store_missing_file_gives_defaults(tmp_path: Path) -> None:
    store = FilesystemConfigStore(tmp_path / "config.toml")

    assert not store.exists()
    assert store.load() == GheditConfig()


def test_filesystem_store_set_value_preserves_comments(tmp_path: Path) -> None:
    path = tmp_path / "ghedit" / "config.toml"
    path.parent.mkdir()
    path.write_text('# my settings\nrepo = "owner/repo"\n', encoding="utf-8")
    store = FilesystemConfigStore(path)

    updated = store.set_value("cache_ttl_seconds", "120")

    assert updated.cache_ttl_seconds == 120
    assert updated.repo == "owner/repo"
    content = path.read_text(encoding="utf-8")
    assert "# my settings" in content
    assert "cache_ttl_seconds = 120" in content


def test_filesystem_store_creates_file(tmp_path: Path) -> None:
    store = FilesystemConfigStore(tmp_path / "new" / "config.toml")

    store.set_value("default_state", "ALL")

    assert store.exists()
    assert store.load().default_state == "all"


def test_filesystem_store_malformed_file(tmp_path: Path) -> None:
    path = tmp_path / "config.toml"
    path.write_text("repo = ", encoding="utf-8")

    with pytest.raises(ValueError, match="Malformed config file"):
        FilesystemConfigStore(path).load()


def test_in_memory_store_set_value() -> None:
    store = InMemoryConfigStore()

    store.set_value("repo", "owner/repo")

    assert store.exists()
    assert store.load().repo == "owner/repo"
