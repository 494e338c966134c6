"""Tests for the config command group."""

from click.testing import CliRunner

from ghedit.cli.cli import cli
from ghedit.core.config import GheditConfig, InMemoryConfigStore
from ghedit.core.context import GheditContext


def test_config_show_lists_every_key() -> None:
    ctx = GheditContext.for_test(config=GheditConfig(repo="owner/repo"))

    result = CliRunner().invoke(cli, ["config", "show"], obj=ctx)

    assert result.exit_code == 0
    assert "repo=owner/repo" in result.output
    assert "cache_ttl_seconds=300" in result.output
    assert "delete_confirmation=true" in result.output
    assert "editor=(unset)" in result.output


def test_config_get() -> None:
    ctx = GheditContext.for_test(config=GheditConfig(list_limit=50))

    result = CliRunner().invoke(cli, ["config", "get", "list_limit"], obj=ctx)

    assert result.exit_code == 0
    assert result.output.strip() == "50"


def test_config_set_persists_value() -> None:
    store = InMemoryConfigStore()
    ctx = GheditContext.for_test(config_store=store)

    result = CliRunner().invoke(cli, ["config", "set", "cache_ttl_seconds", "60"], obj=ctx)

    assert result.exit_code == 0, result.output
    assert "Set cache_ttl_seconds=60" in result.output
    assert store.load().cache_ttl_seconds == 60


def test_config_set_unknown_key() -> None:
    result = CliRunner().invoke(
        cli, ["config", "set", "colour", "red"], obj=GheditContext.for_test()
    )

    assert result.exit_code == 1
    assert "Unknown config key: colour" in result.output


def test_config_set_invalid_value() -> None:
    result = CliRunner().invoke(
        cli, ["config", "set", "list_limit", "many"], obj=GheditContext.for_test()
    )

    assert result.exit_code == 1
    assert "Invalid value 'many' for 'list_limit'" in result.output
