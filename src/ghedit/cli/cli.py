import dataclasses
import logging
import os

import click

from ghedit.cli.commands.config import config_group
from ghedit.cli.commands.issue import issue_group
from ghedit.cli.output import error_output
from ghedit.core.context import GheditContext, create_context
from ghedit.core.issues.dry_run import DryRunIssueSource

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags


def _configure_logging() -> None:
    if os.getenv("GHEDIT_DEBUG"):
        logging.basicConfig(level=logging.DEBUG, format="[DEBUG %(name)s:%(lineno)d] %(message)s")


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="ghedit")
@click.option("--repo", "-R", help="Repository as OWNER/REPO (default: current directory's)")
@click.option("--dry-run", is_flag=True, help="Print mutations instead of running them")
@click.pass_context
def cli(ctx: click.Context, repo: str | None, dry_run: bool) -> None:
    """Edit GitHub issues as plain text."""
    _configure_logging()
    # Only create context if not already provided (e.g., by tests)
    if ctx.obj is None:
        try:
            ctx.obj = create_context(dry_run=dry_run, repo=repo)
        except ValueError as e:
            error_output(str(e))
            raise SystemExit(1) from e
        return

    obj: GheditContext = ctx.obj.with_repo(repo)
    if dry_run and not obj.dry_run:
        obj = dataclasses.replace(obj, issues=DryRunIssueSource(obj.issues), dry_run=True)
    ctx.obj = obj


cli.add_command(issue_group)
cli.add_command(config_group)


def main() -> None:
    """CLI entry point used by the `ghedit` console script."""
    cli()
