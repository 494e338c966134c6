"""Filter context describing which issues a list view requests."""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from ghedit.models.issue import Issue

DEFAULT_LIST_LIMIT = 30
CURRENT_REPO_SCOPE = "current"


class StateFilter(Enum):
    """State filter accepted by `gh issue list --state`."""

    OPEN = "open"
    CLOSED = "closed"
    ALL = "all"

    @classmethod
    def parse(cls, token: str | None) -> "StateFilter":
        """Parse a state filter token; empty means ALL.

        Raises:
            ValueError: If the token is not open, closed or all
        """
        if token is None or not token.strip():
            return cls.ALL
        normalized = token.strip().lower()
        for state in cls:
            if state.value == normalized:
                return state
        raise ValueError(f"Invalid state filter '{token}' (must be open, closed or all)")

    def matches(self, issue: Issue) -> bool:
        if self is StateFilter.OPEN:
            return issue.is_open()
        if self is StateFilter.CLOSED:
            return issue.is_closed()
        return True


def scope_key(repo: str | None) -> str:
    """Cache-key fragment for a repository ("owner/repo" -> "owner_repo")."""
    if not repo:
        return CURRENT_REPO_SCOPE
    return repo.replace("/", "_")


def scope_prefix(repo: str | None) -> str:
    """Prefix shared by every cached list of repo.

    The scope ends with ":", which cannot occur in a repository name, so
    "owner/repo" never matches the lists of "owner/repo_x".
    """
    return f"issues_{scope_key(repo)}:"


def split_csv(values: Iterable[str]) -> tuple[str, ...]:
    """Flatten comma-separated option values into a tuple of trimmed names."""
    names: list[str] = []
    for value in values:
        for part in value.split(","):
            part = part.strip()
            if part and part not in names:
                names.append(part)
    return tuple(names)


@dataclass(frozen=True)
class FilterContext:
    """Active query restricting which issues are requested and displayed.

    Fields map one-to-one onto `gh issue list` flags. labels use AND logic,
    as gh does.
    """

    state: StateFilter = StateFilter.OPEN
    assignee: str | None = None
    author: str | None = None
    labels: tuple[str, ...] = ()
    mention: str | None = None
    milestone: str | None = None
    search: str | None = None
    limit: int = DEFAULT_LIST_LIMIT

    @classmethod
    def from_options(
        cls,
        *,
        state: str | None = "open",
        assignee: str | None = None,
        author: str | None = None,
        labels: Iterable[str] = (),
        mention: str | None = None,
        milestone: str | None = None,
        search: str | None = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> "FilterContext":
        """Normalize raw option values (as typed on the command line)."""
        if limit <= 0:
            raise ValueError(f"Invalid limit {limit} (must be positive)")
        return cls(
            state=StateFilter.parse(state),
            assignee=_blank_to_none(assignee),
            author=_blank_to_none(author),
            labels=split_csv(labels),
            mention=_blank_to_none(mention),
            milestone=_blank_to_none(milestone),
            search=_blank_to_none(search),
            limit=limit,
        )

    def cache_key(self, repo: str | None) -> str:
        """Cache key for this view of repo.

        The key is `issues_<scope>:<state>`, extended with the remaining
        filter fields when any are set so differently filtered views never
        share a slot.
        """
        key = f"{scope_prefix(repo)}{self.state.value}"
        extras = [
            f"{name}={value}"
            for name, value in (
                ("assignee", self.assignee),
                ("author", self.author),
                ("label", ",".join(self.labels) if self.labels else None),
                ("mention", self.mention),
                ("milestone", self.milestone),
                ("search", self.search),
            )
            if value
        ]
        if self.limit != DEFAULT_LIST_LIMIT:
            extras.append(f"limit={self.limit}")
        if extras:
            key += "_" + "&".join(extras)
        return key

    def to_gh_args(self) -> list[str]:
        """Render as `gh issue list` flags."""
        args = ["--limit", str(self.limit), "--state", self.state.value]
        if self.assignee:
            args.extend(["--assignee", self.assignee])
        if self.author:
            args.extend(["--author", self.author])
        for label in self.labels:
            args.extend(["--label", label])
        if self.mention:
            args.extend(["--mention", self.mention])
        if self.milestone:
            args.extend(["--milestone", self.milestone])
        if self.search:
            args.extend(["--search", self.search])
        return args

    def matches(self, issue: Issue) -> bool:
        """Client-side check of the filters that can be evaluated locally.

        mention and search are only evaluated by GitHub and are ignored here.
        """
        if not self.state.matches(issue):
            return False
        if self.assignee and not issue.is_assigned_to(self.assignee):
            return False
        if self.author and issue.author_login != self.author:
            return False
        if any(not issue.has_label(label) for label in self.labels):
            return False
        if self.milestone and (
            issue.milestone is None or issue.milestone.title != self.milestone
        ):
            return False
        return True

    def describe(self) -> str:
        """One-line human summary, e.g. "state=open label=bug"."""
        parts = [f"state={self.state.value}"]
        if self.assignee:
            parts.append(f"assignee={self.assignee}")
        if self.author:
            parts.append(f"author={self.author}")
        if self.labels:
            parts.append(f"label={','.join(self.labels)}")
        if self.mention:
            parts.append(f"mention={self.mention}")
        if self.milestone:
            parts.append(f"milestone={self.milestone}")
        if self.search:
            parts.append(f"search={self.search!r}")
        return " ".join(parts)


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None
