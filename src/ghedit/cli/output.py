"""Output helpers for CLI commands with clear intent.

user_output is for messages meant for the person at the terminal and goes to
stderr. machine_output is for data that may be piped and goes to stdout.
"""

from typing import Any

import click


def user_output(message: Any = "", nl: bool = True) -> None:
    click.echo(message, err=True, nl=nl)


def machine_output(message: Any = "", nl: bool = True) -> None:
    click.echo(message, nl=nl)


def error_output(message: str) -> None:
    """Print "Error: <message>" with the prefix in red."""
    user_output(click.style("Error: ", fg="red") + message)
