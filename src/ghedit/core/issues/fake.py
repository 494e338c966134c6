"""In-memory fake implementation of the issue source for testing."""

import asyncio
import copy

from ghedit.core.errors import FetchError, MutationError
from ghedit.core.issues.abc import IssueSource
from ghedit.core.issues.types import (
    CreateIssueResult,
    IssueField,
    IssueTemplateRef,
    NewIssue,
    StateAction,
)
from ghedit.models.filter_context import FilterContext
from ghedit.models.issue import Issue, RawIssue

# Keys of per-mutation failure/hang tables: (issue number, "title" | "body" | "state")
MutationKey = tuple[int, str]


class FakeIssueSource(IssueSource):
    """In-memory fake implementation for testing.

    All state is provided via constructor using keyword arguments.
    This class has NO public setup methods; mutations are recorded for test
    assertions and applied to the stored issues.
    """

    def __init__(
        self,
        *,
        issues: dict[int, RawIssue] | None = None,
        next_issue_number: int = 1,
        username: str | None = "testuser",
        fetch_error: str | None = None,
        mutation_errors: dict[MutationKey, str] | None = None,
        hanging: set[MutationKey] | None = None,
        fetch_gate: asyncio.Event | None = None,
        templates: dict[str, str] | None = None,
    ) -> None:
        """Create FakeIssueSource with pre-configured state.

        Args:
            issues: Mapping of issue number -> raw issue dict (gh JSON shape)
            next_issue_number: Next issue number to assign on create
            username: Login returned by current_user() (None = not authenticated)
            fetch_error: If set, every fetch raises FetchError with this message
            mutation_errors: (number, field) -> message for mutations that fail
            hanging: (number, field) pairs whose mutation never completes
            fetch_gate: If set, fetches wait for this event before answering
            templates: Template path (".github/ISSUE_TEMPLATE/x.md") -> raw text
        """
        self._issues: dict[int, RawIssue] = copy.deepcopy(issues) if issues else {}
        self._next_issue_number = next_issue_number
        self._username = username
        self._fetch_error = fetch_error
        self._mutation_errors = mutation_errors or {}
        self._hanging = hanging or set()
        self._fetch_gate = fetch_gate
        self._templates = dict(templates) if templates else {}
        self._fetch_template_calls: list[IssueTemplateRef] = []
        self._fetch_list_calls: list[tuple[str | None, FilterContext]] = []
        self._fetch_one_calls: list[tuple[str | None, int]] = []
        self._field_updates: list[tuple[int, IssueField, str]] = []
        self._state_transitions: list[tuple[int, StateAction]] = []
        self._created_issues: list[NewIssue] = []
        self._deleted_issues: list[int] = []

    @property
    def issues(self) -> dict[int, RawIssue]:
        """Current stored issues, for test assertions."""
        return copy.deepcopy(self._issues)

    @property
    def fetch_list_calls(self) -> list[tuple[str | None, FilterContext]]:
        """Read-only access to list fetches as (scope, filter_context) tuples."""
        return self._fetch_list_calls

    @property
    def fetch_one_calls(self) -> list[tuple[str | None, int]]:
        return self._fetch_one_calls

    @property
    def field_updates(self) -> list[tuple[int, IssueField, str]]:
        """Read-only access to title/body updates as (number, field, value) tuples.

        Only successful updates are recorded.
        """
        return self._field_updates

    @property
    def state_transitions(self) -> list[tuple[int, StateAction]]:
        """Read-only access to successful close/reopen calls."""
        return self._state_transitions

    @property
    def created_issues(self) -> list[NewIssue]:
        return self._created_issues

    @property
    def fetch_template_calls(self) -> list[IssueTemplateRef]:
        return self._fetch_template_calls

    @property
    def deleted_issues(self) -> list[int]:
        return self._deleted_issues

    async def _before_fetch(self) -> None:
        if self._fetch_gate is not None:
            await self._fetch_gate.wait()
        if self._fetch_error is not None:
            raise FetchError(self._fetch_error)

    async def _before_mutation(self, number: int, field_name: str) -> None:
        key = (number, field_name)
        if key in self._hanging:
            # Never set: simulates a gh process that does not exit
            await asyncio.Event().wait()
        # Yield once so concurrent mutations interleave like real subprocesses
        await asyncio.sleep(0)
        if key in self._mutation_errors:
            raise MutationError(self._mutation_errors[key])
        if number not in self._issues:
            raise MutationError(f"Issue #{number} not found")

    async def fetch_list(self, scope: str | None, filter_context: FilterContext) -> list[RawIssue]:
        self._fetch_list_calls.append((scope, filter_context))
        await self._before_fetch()
        matching = [
            copy.deepcopy(raw)
            for raw in self._issues.values()
            if filter_context.matches(Issue.from_raw(raw))
        ]
        return matching[: filter_context.limit]

    async def fetch_one(self, scope: str | None, number: int) -> RawIssue:
        self._fetch_one_calls.append((scope, number))
        await self._before_fetch()
        if number not in self._issues:
            raise FetchError(f"Issue #{number} not found")
        return copy.deepcopy(self._issues[number])

    async def mutate_field(
        self, scope: str | None, number: int, field: IssueField, value: str
    ) -> None:
        await self._before_mutation(number, field.value)
        self._issues[number][field.value] = value
        self._field_updates.append((number, field, value))

    async def transition_state(self, scope: str | None, number: int, action: StateAction) -> None:
        await self._before_mutation(number, "state")
        self._issues[number]["state"] = "CLOSED" if action is StateAction.CLOSE else "OPEN"
        self._state_transitions.append((number, action))

    async def create(self, scope: str | None, fields: NewIssue) -> CreateIssueResult:
        number = self._next_issue_number
        self._next_issue_number += 1
        url = f"https://github.com/test-owner/test-repo/issues/{number}"
        self._issues[number] = {
            "number": number,
            "title": fields.title,
            "body": fields.body,
            "state": "OPEN",
            "labels": [{"name": label} for label in fields.labels],
            "assignees": [{"login": login} for login in fields.assignees],
            "url": url,
        }
        self._created_issues.append(fields)
        return CreateIssueResult(number=number, url=url)

    async def delete(self, scope: str | None, number: int) -> None:
        await self._before_mutation(number, "delete")
        del self._issues[number]
        self._deleted_issues.append(number)

    async def current_user(self) -> str | None:
        return self._username

    async def list_templates(self, scope: str | None) -> list[IssueTemplateRef]:
        return [
            IssueTemplateRef(name=path.rsplit("/", 1)[-1], path=path, repo=scope)
            for path in sorted(self._templates)
        ]

    async def fetch_template(self, ref: IssueTemplateRef) -> str:
        self._fetch_template_calls.append(ref)
        await self._before_fetch()
        if ref.path not in self._templates:
            raise FetchError(f"Template {ref.path} not found")
        return self._templates[ref.path]
