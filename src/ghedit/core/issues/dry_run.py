"""No-op wrapper for issue source operations."""

import click

from ghedit.core.issues.abc import IssueSource
from ghedit.core.issues.types import (
    CreateIssueResult,
    IssueField,
    IssueTemplateRef,
    NewIssue,
    StateAction,
)
from ghedit.models.filter_context import FilterContext
from ghedit.models.issue import RawIssue


class DryRunIssueSource(IssueSource):
    """No-op wrapper for issue operations.

    Read operations are delegated to the wrapped implementation.
    Write operations print what would happen and return without executing.
    """

    def __init__(self, wrapped: IssueSource) -> None:
        """Initialize dry-run wrapper with a real implementation.

        Args:
            wrapped: The issue source to delegate reads to
        """
        self._wrapped = wrapped

    def _announce(self, message: str) -> None:
        click.echo(click.style("[DRY RUN] ", fg="yellow") + message, err=True)

    async def fetch_list(self, scope: str | None, filter_context: FilterContext) -> list[RawIssue]:
        """Delegate read operation to wrapped implementation."""
        return await self._wrapped.fetch_list(scope, filter_context)

    async def fetch_one(self, scope: str | None, number: int) -> RawIssue:
        """Delegate read operation to wrapped implementation."""
        return await self._wrapped.fetch_one(scope, number)

    async def mutate_field(
        self, scope: str | None, number: int, field: IssueField, value: str
    ) -> None:
        self._announce(f"Would update {field.value} of issue #{number}")

    async def transition_state(self, scope: str | None, number: int, action: StateAction) -> None:
        self._announce(f"Would {action.value} issue #{number}")

    async def create(self, scope: str | None, fields: NewIssue) -> CreateIssueResult:
        """Returns a placeholder result so dry-run workflows can continue."""
        self._announce(f"Would create issue '{fields.title}'")
        return CreateIssueResult(number=1, url="https://github.com/dry-run/dry-run/issues/1")

    async def delete(self, scope: str | None, number: int) -> None:
        self._announce(f"Would delete issue #{number}")

    async def current_user(self) -> str | None:
        """Delegate read operation to wrapped implementation."""
        return await self._wrapped.current_user()

    async def list_templates(self, scope: str | None) -> list[IssueTemplateRef]:
        """Delegate read operation to wrapped implementation."""
        return await self._wrapped.list_templates(scope)

    async def fetch_template(self, ref: IssueTemplateRef) -> str:
        """Delegate read operation to wrapped implementation."""
        return await self._wrapped.fetch_template(ref)
