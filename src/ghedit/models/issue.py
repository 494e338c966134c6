"""GitHub issue model.

Issues are built from the JSON printed by `gh issue list/view --json ...` and
are immutable: an edit produces a new Issue (dataclasses.replace), never an
in-place change, so the fetched original stays safe to diff against.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any

RawIssue = dict[str, Any]


class IssueState(Enum):
    """State of an issue, using gh's canonical tokens."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"

    @classmethod
    def parse(cls, token: str) -> "IssueState":
        """Parse a state token case-insensitively.

        Raises:
            ValueError: If token is not "open" or "closed" in any casing
        """
        normalized = token.strip().upper()
        for state in cls:
            if state.value == normalized:
                return state
        raise ValueError(f"Invalid state '{token}' (must be OPEN or CLOSED)")

    @classmethod
    def from_raw(cls, token: str | None) -> "IssueState":
        """Lenient parse for fetched data: unknown states read as OPEN."""
        if token is None:
            return cls.OPEN
        try:
            return cls.parse(token)
        except ValueError:
            return cls.OPEN


def _drop_none(data: dict[str, Any]) -> dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


@dataclass(frozen=True)
class User:
    """A GitHub account (author, assignee, commenter)."""

    login: str
    id: str | None = None
    name: str | None = None
    is_bot: bool | None = None

    @classmethod
    def from_raw(cls, data: dict[str, Any]) -> "User":
        return cls(
            login=data["login"],
            id=data.get("id"),
            name=data.get("name"),
            is_bot=data.get("is_bot"),
        )

    def to_raw(self) -> dict[str, Any]:
        return _drop_none(
            {"id": self.id, "is_bot": self.is_bot, "login": self.login, "name": self.name}
        )


@dataclass(frozen=True)
class Label:
    name: str
    id: str | None = None
    description: str | None = None
    color: str | None = None

    @classmethod
    def from_raw(cls, data: str | dict[str, Any]) -> "Label":
        # Labels may arrive as bare names (e.g. from templates)
        if isinstance(data, str):
            return cls(name=data)
        return cls(
            name=data["name"],
            id=data.get("id"),
            description=data.get("description"),
            color=data.get("color"),
        )

    def to_raw(self) -> dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "name": self.name,
                "description": self.description,
                "color": self.color,
            }
        )


@dataclass(frozen=True)
class Milestone:
    title: str
    number: int | None = None
    description: str | None = None
    due_on: str | None = None

    @classmethod
    def from_raw(cls, data: dict[str, Any]) -> "Milestone":
        return cls(
            title=data["title"],
            number=data.get("number"),
            description=data.get("description"),
            due_on=data.get("dueOn"),
        )

    def to_raw(self) -> dict[str, Any]:
        return _drop_none(
            {
                "number": self.number,
                "title": self.title,
                "description": self.description,
                "dueOn": self.due_on,
            }
        )


@dataclass(frozen=True)
class Comment:
    """A comment on an issue (only present when fetched with comments)."""

    body: str
    author: User | None = None
    id: str | None = None
    created_at: str | None = None
    url: str | None = None

    @classmethod
    def from_raw(cls, data: dict[str, Any]) -> "Comment":
        author = data.get("author")
        return cls(
            body=data.get("body", ""),
            author=User.from_raw(author) if author else None,
            id=data.get("id"),
            created_at=data.get("createdAt"),
            url=data.get("url"),
        )

    def to_raw(self) -> dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "author": self.author.to_raw() if self.author else None,
                "body": self.body,
                "createdAt": self.created_at,
                "url": self.url,
            }
        )


# Wire keys, in the order gh prints them, for fields Issue understands
ISSUE_JSON_FIELDS = (
    "number",
    "id",
    "title",
    "body",
    "state",
    "stateReason",
    "labels",
    "author",
    "assignees",
    "milestone",
    "comments",
    "createdAt",
    "updatedAt",
    "closedAt",
    "url",
)


@dataclass(frozen=True)
class Issue:
    """A single GitHub issue.

    Fields mirror `gh issue view --json`. Timestamps are kept as the ISO 8601
    strings gh prints; use parse_timestamp() for datetime values.
    """

    number: int
    title: str
    state: IssueState = IssueState.OPEN
    body: str | None = None
    node_id: str | None = None
    state_reason: str | None = None
    labels: tuple[Label, ...] = ()
    author: User | None = None
    assignees: tuple[User, ...] = ()
    milestone: Milestone | None = None
    comments: tuple[Comment, ...] | None = None
    created_at: str | None = None
    updated_at: str | None = None
    closed_at: str | None = None
    url: str | None = None
    # Wire keys present in the source JSON, so to_raw() reproduces it exactly
    raw_keys: frozenset[str] | None = field(default=None, compare=False, repr=False)

    @classmethod
    def from_raw(cls, data: RawIssue) -> "Issue":
        """Build an Issue from one element of gh's JSON output."""
        author = data.get("author")
        milestone = data.get("milestone")
        comments = data.get("comments")
        return cls(
            number=int(data["number"]),
            title=data.get("title", ""),
            state=IssueState.from_raw(data.get("state")),
            body=data.get("body"),
            node_id=data.get("id"),
            state_reason=data.get("stateReason"),
            labels=tuple(Label.from_raw(label) for label in data.get("labels") or []),
            author=User.from_raw(author) if author else None,
            assignees=tuple(User.from_raw(user) for user in data.get("assignees") or []),
            milestone=Milestone.from_raw(milestone) if milestone else None,
            comments=(
                tuple(Comment.from_raw(comment) for comment in comments)
                if comments is not None
                else None
            ),
            created_at=data.get("createdAt"),
            updated_at=data.get("updatedAt"),
            closed_at=data.get("closedAt"),
            url=data.get("url"),
            raw_keys=frozenset(key for key in data if key in ISSUE_JSON_FIELDS),
        )

    def to_raw(self) -> RawIssue:
        """Serialize back to gh's JSON shape (inverse of from_raw)."""
        values: dict[str, Any] = {
            "number": self.number,
            "id": self.node_id,
            "title": self.title,
            "body": self.body,
            "state": self.state.value,
            "stateReason": self.state_reason,
            "labels": [label.to_raw() for label in self.labels],
            "author": self.author.to_raw() if self.author else None,
            "assignees": [user.to_raw() for user in self.assignees],
            "milestone": self.milestone.to_raw() if self.milestone else None,
            "comments": (
                [comment.to_raw() for comment in self.comments]
                if self.comments is not None
                else None
            ),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
            "closedAt": self.closed_at,
            "url": self.url,
        }
        if self.raw_keys is None:
            always = {"number", "title", "state", "labels", "assignees"}
            return {
                key: value
                for key, value in values.items()
                if key in always or value is not None
            }
        return {key: value for key, value in values.items() if key in self.raw_keys}

    def with_changes(self, **changes: Any) -> "Issue":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    def is_open(self) -> bool:
        return self.state is IssueState.OPEN

    def is_closed(self) -> bool:
        return self.state is IssueState.CLOSED

    @property
    def label_names(self) -> frozenset[str]:
        return frozenset(label.name for label in self.labels)

    @property
    def assignee_logins(self) -> frozenset[str]:
        return frozenset(user.login for user in self.assignees)

    @property
    def author_login(self) -> str | None:
        return self.author.login if self.author else None

    def has_label(self, name: str) -> bool:
        return name in self.label_names

    def is_assigned_to(self, login: str) -> bool:
        return login in self.assignee_logins

    def is_assigned(self) -> bool:
        return len(self.assignees) > 0

    def has_milestone(self) -> bool:
        return self.milestone is not None

    def comment_count(self) -> int:
        return len(self.comments) if self.comments else 0


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse a gh ISO 8601 timestamp ("2024-01-01T00:00:00Z")."""
    if value is None:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))
