"""Data types for the gh issues integration."""

from dataclasses import dataclass, field
from enum import Enum

from ghedit.models.issue import IssueState


class IssueField(Enum):
    """Issue fields that are edited by assignment (`gh issue edit`)."""

    TITLE = "title"
    BODY = "body"


class StateAction(Enum):
    """State changes are imperative gh commands, not field assignments."""

    CLOSE = "close"
    REOPEN = "reopen"

    @classmethod
    def for_target(cls, state: IssueState) -> "StateAction":
        """Action that moves an issue into state."""
        return cls.CLOSE if state is IssueState.CLOSED else cls.REOPEN


@dataclass(frozen=True)
class NewIssue:
    """Fields for creating an issue.

    Attributes:
        title: Issue title (required, non-empty)
        body: Issue body markdown
        labels: Label names to apply
        assignees: Logins to assign
        milestone: Milestone title
        projects: Project names to add the issue to
    """

    title: str
    body: str = ""
    labels: tuple[str, ...] = field(default_factory=tuple)
    assignees: tuple[str, ...] = field(default_factory=tuple)
    milestone: str | None = None
    projects: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class CreateIssueResult:
    """Result from creating a GitHub issue.

    Attributes:
        number: Issue number (e.g., 123)
        url: Full GitHub URL (e.g., https://github.com/owner/repo/issues/123)
    """

    number: int
    url: str


@dataclass(frozen=True)
class IssueTemplateRef:
    """An issue template found in a repository or the working directory.

    Attributes:
        name: File name (e.g., "bug_report.md")
        path: Path inside the repository (".github/ISSUE_TEMPLATE/bug_report.md")
        repo: Repository holding the file, None for the current repository
        local: True when found in the working directory instead of on GitHub
    """

    name: str
    path: str
    repo: str | None = None
    local: bool = False

    @property
    def stem(self) -> str:
        return self.name.removesuffix(".md")
