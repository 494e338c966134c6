"""Ordered, indexed collection of issues.

Every transformation (filter, sort) returns a new IssueCollection; the source
collection is never mutated.
"""

from collections.abc import Callable, Iterable, Iterator
from typing import Any, TypeVar

from ghedit.core.errors import DuplicateIssueError
from ghedit.models.filter_context import FilterContext
from ghedit.models.issue import Issue, RawIssue

T = TypeVar("T")

IssuePredicate = Callable[[Issue], bool]


class IssueCollection:
    """A list of issues with an index by issue number.

    Invariant: index[issue.number] is issue for every issue, and numbers are
    unique. Construction rejects duplicates with DuplicateIssueError.
    """

    def __init__(self, issues: Iterable[Issue] = ()) -> None:
        self._issues: tuple[Issue, ...] = tuple(issues)
        self._index: dict[int, Issue] = {}
        for issue in self._issues:
            if issue.number in self._index:
                raise DuplicateIssueError(issue.number)
            self._index[issue.number] = issue

    @classmethod
    def from_raw(cls, data: Iterable[RawIssue]) -> "IssueCollection":
        """Build a collection from gh's JSON array output."""
        return cls(Issue.from_raw(item) for item in data)

    def to_raw(self) -> list[RawIssue]:
        """Serialize back to the JSON array shape (inverse of from_raw)."""
        return [issue.to_raw() for issue in self._issues]

    @property
    def issues(self) -> tuple[Issue, ...]:
        return self._issues

    def __len__(self) -> int:
        return len(self._issues)

    def __iter__(self) -> Iterator[Issue]:
        return iter(self._issues)

    def __contains__(self, number: object) -> bool:
        return number in self._index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IssueCollection):
            return NotImplemented
        return self._issues == other._issues

    def __repr__(self) -> str:
        return f"IssueCollection({[issue.number for issue in self._issues]})"

    def is_empty(self) -> bool:
        return not self._issues

    def get(self, number: int) -> Issue | None:
        return self._index.get(number)

    def numbers(self) -> list[int]:
        return [issue.number for issue in self._issues]

    def filter(self, predicate: IssuePredicate) -> "IssueCollection":
        """Return the issues matching predicate, in their current order."""
        return IssueCollection(issue for issue in self._issues if predicate(issue))

    def sort_by(self, key_fn: Callable[[Issue], Any], descending: bool = False) -> "IssueCollection":
        """Return a stably sorted copy.

        Ties keep their current relative order in both directions.
        """
        return IssueCollection(sorted(self._issues, key=key_fn, reverse=descending))

    def sort_by_key(self, name: str, descending: bool = False) -> "IssueCollection":
        """Sort by one of the named keys in SORT_KEYS.

        Raises:
            ValueError: If name is not a known sort key
        """
        if name not in SORT_KEYS:
            known = ", ".join(SORT_KEYS)
            raise ValueError(f"Unknown sort key '{name}' (expected one of: {known})")
        return self.sort_by(SORT_KEYS[name], descending)

    def open_only(self) -> "IssueCollection":
        return self.filter(lambda issue: issue.is_open())

    def closed_only(self) -> "IssueCollection":
        return self.filter(lambda issue: issue.is_closed())

    def with_label(self, name: str) -> "IssueCollection":
        return self.filter(lambda issue: issue.has_label(name))

    def assigned_to(self, login: str) -> "IssueCollection":
        return self.filter(lambda issue: issue.is_assigned_to(login))

    def unassigned(self) -> "IssueCollection":
        return self.filter(lambda issue: not issue.is_assigned())

    def by_author(self, login: str) -> "IssueCollection":
        return self.filter(lambda issue: issue.author_login == login)

    def in_milestone(self, title: str) -> "IssueCollection":
        return self.filter(
            lambda issue: issue.milestone is not None and issue.milestone.title == title
        )

    def matching(self, filter_context: FilterContext) -> "IssueCollection":
        return self.filter(filter_context.matches)

    def map(self, fn: Callable[[Issue], T]) -> list[T]:
        return [fn(issue) for issue in self._issues]

    def find(self, predicate: IssuePredicate) -> Issue | None:
        for issue in self._issues:
            if predicate(issue):
                return issue
        return None

    def any(self, predicate: IssuePredicate) -> bool:
        return self.find(predicate) is not None

    def all(self, predicate: IssuePredicate) -> bool:
        return all(predicate(issue) for issue in self._issues)


# Named sort keys offered by the list views
SORT_KEYS: dict[str, Callable[[Issue], Any]] = {
    "number": lambda issue: issue.number,
    "title": lambda issue: issue.title.lower(),
    "state": lambda issue: issue.state.value,
    "author": lambda issue: (issue.author_login or "").lower(),
    "created": lambda issue: issue.created_at or "",
    "updated": lambda issue: issue.updated_at or "",
    "labels": lambda issue: len(issue.labels),
}
