"""Issue commands: list, edit, view, create, close, reopen and delete."""

import asyncio
from collections.abc import Callable, Coroutine
from pathlib import Path
from typing import Any, ParamSpec, TypeVar

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ghedit.cli.output import error_output, machine_output, user_output
from ghedit.core.context import GheditContext
from ghedit.core.errors import GheditError, ValidationError
from ghedit.core.issue_service import IssueService, SaveResult
from ghedit.core.issues.types import IssueTemplateRef, StateAction
from ghedit.models.collection import SORT_KEYS, IssueCollection
from ghedit.models.filter_context import FilterContext
from ghedit.models.issue import Issue, IssueState
from ghedit.reconcile.detail_view import render_issue_detail
from ghedit.reconcile.list_view import render_issue_list
from ghedit.reconcile.templates import IssueTemplate, parse_issue_template, render_new_issue

T = TypeVar("T")
P = ParamSpec("P")
R = TypeVar("R")

EDIT_EXTENSION = ".md"


def run_or_exit(coro: Coroutine[Any, Any, T]) -> T:
    """Run coro to completion, turning GheditError into "Error: ..." and exit 1."""
    try:
        return asyncio.run(coro)
    except GheditError as e:
        error_output(str(e))
        raise SystemExit(1) from e


def issue_filter_options(f: Callable[P, R]) -> Callable[P, R]:
    """Shared filter options for list/edit commands."""
    f = click.option(
        "--refresh",
        is_flag=True,
        help="Ignore cached results and fetch again",
    )(f)
    f = click.option("--desc", is_flag=True, help="Sort in descending order")(f)
    f = click.option(
        "--sort",
        "sort_key",
        type=click.Choice(sorted(SORT_KEYS), case_sensitive=False),
        help="Sort issues by this key",
    )(f)
    f = click.option("--limit", "-L", type=int, help="Maximum number of issues to fetch")(f)
    f = click.option("--search", "-S", help="Search issues with a GitHub query")(f)
    f = click.option("--milestone", "-m", help="Filter by milestone title")(f)
    f = click.option("--mention", help="Filter by mentioned user")(f)
    f = click.option(
        "--label",
        "-l",
        multiple=True,
        help="Filter by label (repeat or comma-separate for AND logic)",
    )(f)
    f = click.option("--author", "-A", help="Filter by author")(f)
    f = click.option("--assignee", "-a", help="Filter by assignee (@me for yourself)")(f)
    f = click.option(
        "--state",
        "-s",
        type=click.Choice(["open", "closed", "all"], case_sensitive=False),
        help="Filter by state (default from config)",
    )(f)
    return f


def _build_filter(ctx: GheditContext, options: dict[str, Any]) -> FilterContext:
    try:
        return FilterContext.from_options(
            state=options["state"] or ctx.config.default_state,
            assignee=options["assignee"],
            author=options["author"],
            labels=options["label"],
            mention=options["mention"],
            milestone=options["milestone"],
            search=options["search"],
            limit=options["limit"] if options["limit"] is not None else ctx.config.list_limit,
        )
    except ValueError as e:
        error_output(str(e))
        raise SystemExit(1) from e


def _sorted(collection: IssueCollection, sort_key: str | None, desc: bool) -> IssueCollection:
    if sort_key is None:
        return collection
    return collection.sort_by_key(sort_key.lower(), descending=desc)


def _state_style(state: IssueState) -> str:
    return "green" if state is IssueState.OPEN else "magenta"


def _render_table(collection: IssueCollection) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("#", style="cyan", no_wrap=True, justify="right")
    table.add_column("state", no_wrap=True)
    table.add_column("title")
    table.add_column("labels")
    table.add_column("assignees")
    table.add_column("updated", no_wrap=True)

    for issue in collection:
        table.add_row(
            str(issue.number),
            f"[{_state_style(issue.state)}]{issue.state.value}[/]",
            escape(issue.title),
            escape(", ".join(label.name for label in issue.labels)),
            ", ".join(user.login for user in issue.assignees),
            (issue.updated_at or "")[:10],
        )
    return table


def _report_save(result: SaveResult, noun: str) -> None:
    """Print the outcome of a save and exit 1 if any mutation failed."""
    if result.no_changes:
        user_output("No changes to save.")
        return

    assert result.dispatch is not None
    if result.dispatch.ok:
        count = len(result.applied)
        user_output(click.style("✓ ", fg="green") + f"Updated {count} {noun}(s)")
        return

    user_output(click.style("Errors saving changes:", fg="red"))
    for message in result.dispatch.errors:
        user_output(f"  {message}")
    succeeded = len(result.dispatch.succeeded)
    if succeeded:
        user_output(f"{succeeded} change(s) were applied and have not been reverted.")
    raise SystemExit(1)


def _edit_until_valid(
    text: str,
    editor: str | None,
    save: Callable[[str], Coroutine[Any, Any, SaveResult]],
) -> SaveResult | None:
    """Open text in the editor and save it, re-opening on validation errors.

    The user's edited text is kept across retries so nothing is lost.
    Returns None if the editor was closed without saving.
    """
    current = text
    while True:
        edited = click.edit(current, editor=editor, extension=EDIT_EXTENSION, require_save=True)
        if edited is None:
            user_output("Editor closed without saving, nothing to do.")
            return None
        try:
            return asyncio.run(save(edited))
        except ValidationError as e:
            error_output("Invalid edits, nothing was saved:")
            for message in e.messages:
                user_output(f"  {message}")
            if not click.confirm("Re-open the editor to fix them?", default=True, err=True):
                raise SystemExit(1) from e
            current = edited
        except GheditError as e:
            error_output(str(e))
            raise SystemExit(1) from e


@click.group("issue")
def issue_group() -> None:
    """List and edit issues."""


@issue_group.command("list")
@issue_filter_options
@click.option("--plain", is_flag=True, help="Print the editable text form instead of a table")
@click.pass_obj
def list_issues(
    ctx: GheditContext,
    sort_key: str | None,
    desc: bool,
    refresh: bool,
    plain: bool,
    **filters: Any,
) -> None:
    """List issues with optional filters.

    Examples:
        ghedit issue list
        ghedit issue list --state all --label bug --sort updated --desc
        ghedit issue list --assignee @me --plain
    """
    filter_context = _build_filter(ctx, filters)
    service = ctx.issue_service()
    collection = run_or_exit(service.load_list(filter_context, force=refresh))

    if collection.is_empty():
        user_output("No issues found matching the criteria.")
        return

    collection = _sorted(collection, sort_key, desc)
    if plain:
        for line in render_issue_list(collection, filter_context, ctx.repo):
            machine_output(line)
        return

    user_output(f"\nFound {len(collection)} issue(s) ({filter_context.describe()}):\n")
    console = Console(stderr=True, width=200)
    console.print(_render_table(collection))
    console.print()


@issue_group.command("edit")
@issue_filter_options
@click.pass_obj
def edit_issues(
    ctx: GheditContext,
    sort_key: str | None,
    desc: bool,
    refresh: bool,
    **filters: Any,
) -> None:
    """Edit titles and states of many issues at once in $EDITOR.

    Each issue is a line "#NUMBER │ STATE │ TITLE". Change a title or switch
    STATE between OPEN and CLOSED, save and quit to apply.
    """
    filter_context = _build_filter(ctx, filters)
    service = ctx.issue_service()
    original = run_or_exit(service.load_list(filter_context, force=refresh))
    if original.is_empty():
        user_output("No issues found matching the criteria.")
        return

    view = _sorted(original, sort_key, desc)
    text = "\n".join(render_issue_list(view, filter_context, ctx.repo)) + "\n"

    async def save(edited: str) -> SaveResult:
        return await service.save_list(edited.splitlines(), original, filter_context)

    result = _edit_until_valid(text, ctx.config.editor, save)
    if result is not None:
        _report_save(result, "issue")


@issue_group.command("view")
@click.argument("number", type=int)
@click.pass_obj
def view_issue(ctx: GheditContext, number: int) -> None:
    """Print a single issue."""
    issue = run_or_exit(ctx.issue_service().load_detail(number))
    for line in render_issue_detail(issue):
        machine_output(line)
    if issue.comments:
        machine_output()
        machine_output(f"--- {issue.comment_count()} comment(s) ---")
        for comment in issue.comments:
            author = comment.author.login if comment.author else "unknown"
            machine_output()
            machine_output(click.style(f"@{author}", bold=True) + f" {comment.created_at or ''}")
            machine_output(comment.body)


@issue_group.command("edit-one")
@click.argument("number", type=int)
@click.pass_obj
def edit_issue(ctx: GheditContext, number: int) -> None:
    """Edit the title and body of one issue in $EDITOR."""
    service = ctx.issue_service()
    original: Issue = run_or_exit(service.load_detail(number))
    text = "\n".join(render_issue_detail(original)) + "\n"

    async def save(edited: str) -> SaveResult:
        return await service.save_detail(edited.splitlines(), original)

    result = _edit_until_valid(text, ctx.config.editor, save)
    if result is not None:
        _report_save(result, "issue")


def _select_template(refs: list[IssueTemplateRef]) -> IssueTemplateRef | None:
    user_output("Select issue template:")
    user_output("  0) Empty (no template)")
    for index, ref in enumerate(refs, start=1):
        user_output(f"  {index}) {ref.name}")
    choice = click.prompt("Template", type=click.IntRange(0, len(refs)), default=0, err=True)
    return refs[choice - 1] if choice else None


def _resolve_template(
    service: IssueService, template_name: str | None, no_template: bool
) -> IssueTemplate:
    """Template for the create flow: a local file, a named one, or the user's pick."""
    if no_template:
        return IssueTemplate()

    if template_name is not None:
        path = Path(template_name)
        if path.is_file():
            try:
                return parse_issue_template(path.read_text(encoding="utf-8"))
            except ValidationError as e:
                error_output(f"Invalid template {path}: {e}")
                raise SystemExit(1) from e
        ref = run_or_exit(service.find_template(template_name))
    else:
        refs = run_or_exit(service.list_templates())
        if not refs:
            return IssueTemplate()
        ref = _select_template(refs)
        if ref is None:
            return IssueTemplate()

    return run_or_exit(service.load_template(ref))


@issue_group.command("create")
@click.option(
    "--template",
    "-T",
    "template_name",
    help="Template name from .github/ISSUE_TEMPLATE, or a path to a template file",
)
@click.option("--no-template", is_flag=True, help="Start from an empty issue without asking")
@click.option("--title", "-t", help="Title to pre-fill")
@click.option("--label", "-l", "labels", multiple=True, help="Label to add (repeatable)")
@click.option("--assignee", "-a", "assignees", multiple=True, help="Assignee (repeatable)")
@click.option("--milestone", "-m", help="Milestone title")
@click.pass_obj
def create_issue(
    ctx: GheditContext,
    template_name: str | None,
    no_template: bool,
    title: str | None,
    labels: tuple[str, ...],
    assignees: tuple[str, ...],
    milestone: str | None,
) -> None:
    """Create an issue, writing its title and body in $EDITOR.

    Without --template, the repository's issue templates (falling back to
    the owner's .github repository, then the working directory) are offered
    for selection. Command line options take precedence over the template's
    frontmatter.
    """
    service = ctx.issue_service()
    template = _resolve_template(service, template_name, no_template)

    template = IssueTemplate(
        body=template.body,
        title=title or template.title,
        labels=labels or template.labels,
        assignees=assignees or template.assignees,
        projects=template.projects,
        milestone=milestone or template.milestone,
        name=template.name,
        about=template.about,
    )

    edited = click.edit(
        render_new_issue(template),
        editor=ctx.config.editor,
        extension=EDIT_EXTENSION,
        require_save=True,
    )
    if edited is None:
        user_output("Editor closed without saving, no issue created.")
        return

    result = run_or_exit(service.create_issue(edited, template))
    user_output(click.style("✓ ", fg="green") + f"Created issue #{result.number}")
    machine_output(result.url)


def _transition(ctx: GheditContext, number: int, action: StateAction, verb: str) -> None:
    run_or_exit(ctx.issue_service().set_state(number, action))
    user_output(f"{verb} issue #{number}")


@issue_group.command("close")
@click.argument("number", type=int)
@click.pass_obj
def close_issue(ctx: GheditContext, number: int) -> None:
    """Close an issue."""
    _transition(ctx, number, StateAction.CLOSE, "Closed")


@issue_group.command("reopen")
@click.argument("number", type=int)
@click.pass_obj
def reopen_issue(ctx: GheditContext, number: int) -> None:
    """Reopen a closed issue."""
    _transition(ctx, number, StateAction.REOPEN, "Reopened")


@issue_group.command("delete")
@click.argument("number", type=int)
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
def delete_issue(ctx: GheditContext, number: int, yes: bool) -> None:
    """Permanently delete an issue (requires admin rights on the repository)."""
    if ctx.config.delete_confirmation and not yes:
        if not click.confirm(f"Delete issue #{number}? This cannot be undone", err=True):
            user_output("Aborted.")
            raise SystemExit(1)
    run_or_exit(ctx.issue_service().delete_issue(number))
    user_output(f"Deleted issue #{number}")
