"""Abstract interface for the remote issue data source."""

from abc import ABC, abstractmethod

from ghedit.core.issues.types import (
    CreateIssueResult,
    IssueField,
    IssueTemplateRef,
    NewIssue,
    StateAction,
)
from ghedit.models.filter_context import FilterContext
from ghedit.models.issue import RawIssue


class IssueSource(ABC):
    """Abstract interface for fetching and mutating GitHub issues.

    All implementations (real, fake and dry-run) must implement this interface.
    Every method is a coroutine. scope is "owner/repo", or None for the
    repository of the current working directory.
    """

    @abstractmethod
    async def fetch_list(self, scope: str | None, filter_context: FilterContext) -> list[RawIssue]:
        """List issues matching a filter.

        Args:
            scope: Repository ("owner/repo") or None for the current repository
            filter_context: Filters translated into `gh issue list` flags

        Returns:
            Raw issue dicts in gh's JSON shape, in gh's order

        Raises:
            FetchError: If gh CLI fails or prints unparseable output
        """
        ...

    @abstractmethod
    async def fetch_one(self, scope: str | None, number: int) -> RawIssue:
        """Fetch a single issue including its body.

        Raises:
            FetchError: If gh CLI fails or the issue does not exist
        """
        ...

    @abstractmethod
    async def mutate_field(
        self, scope: str | None, number: int, field: IssueField, value: str
    ) -> None:
        """Assign a new title or body to an issue.

        Raises:
            MutationError: If gh CLI fails
        """
        ...

    @abstractmethod
    async def transition_state(self, scope: str | None, number: int, action: StateAction) -> None:
        """Close or reopen an issue.

        Raises:
            MutationError: If gh CLI fails
        """
        ...

    @abstractmethod
    async def create(self, scope: str | None, fields: NewIssue) -> CreateIssueResult:
        """Create a new issue.

        Returns:
            CreateIssueResult with issue number and full GitHub URL

        Raises:
            MutationError: If gh CLI fails
        """
        ...

    @abstractmethod
    async def delete(self, scope: str | None, number: int) -> None:
        """Permanently delete an issue.

        Raises:
            MutationError: If gh CLI fails (including missing admin rights)
        """
        ...

    @abstractmethod
    async def current_user(self) -> str | None:
        """Get the login of the authenticated GitHub user.

        Returns:
            GitHub username if authenticated, None if not authenticated
        """
        ...

    @abstractmethod
    async def list_templates(self, scope: str | None) -> list[IssueTemplateRef]:
        """List markdown issue templates under .github/ISSUE_TEMPLATE.

        Looks in the repository, then in the owner's ".github" repository,
        then in the working directory. Failing lookups mean "no templates"
        rather than an error.
        """
        ...

    @abstractmethod
    async def fetch_template(self, ref: IssueTemplateRef) -> str:
        """Get the raw text (frontmatter and body) of a template.

        Raises:
            FetchError: If the template cannot be read
        """
        ...
