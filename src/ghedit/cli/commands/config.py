import click

from ghedit.cli.output import error_output, machine_output, user_output
from ghedit.core.config import GheditConfig
from ghedit.core.context import GheditContext


def _format_value(value: object) -> str:
    if value is None:
        return "(unset)"
    if isinstance(value, bool):
        return str(value).lower()
    return str(value)


@click.group("config")
def config_group() -> None:
    """Manage ghedit configuration."""


@config_group.command("show")
@click.pass_obj
def config_show(ctx: GheditContext) -> None:
    """Print the effective configuration (file and environment combined)."""
    user_output(click.style(f"Configuration ({ctx.config_store.path()}):", bold=True))
    if not ctx.config_store.exists():
        user_output("  (no config file - defaults in use)")
    for key, value in ctx.config.to_dict().items():
        machine_output(f"  {key}={_format_value(value)}")


@config_group.command("get")
@click.argument("key", metavar="KEY")
@click.pass_obj
def config_get(ctx: GheditContext, key: str) -> None:
    """Print the value of a given configuration key."""
    if key not in GheditConfig.keys():
        error_output(f"Unknown config key: {key}")
        raise SystemExit(1)
    machine_output(_format_value(getattr(ctx.config, key)))


@config_group.command("set")
@click.argument("key", metavar="KEY")
@click.argument("value", metavar="VALUE")
@click.pass_obj
def config_set(ctx: GheditContext, key: str, value: str) -> None:
    """Set a configuration key in the config file.

    Examples:
        ghedit config set repo owner/repo
        ghedit config set cache_ttl_seconds 60
        ghedit config set delete_confirmation false
    """
    if key not in GheditConfig.keys():
        error_output(f"Unknown config key: {key}")
        raise SystemExit(1)

    try:
        updated = ctx.config_store.set_value(key, value)
    except ValueError as e:
        error_output(str(e))
        raise SystemExit(1) from e

    user_output(f"Set {key}={_format_value(getattr(updated, key))}")
