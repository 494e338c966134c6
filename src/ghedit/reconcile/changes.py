"""Diff edited issue snapshots against the originally fetched collection.

Only title, body and state are editable. The result contains only issues
that actually changed, and a single invalid value anywhere aborts the whole
computation so no subset of a save is ever applied silently.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from ghedit.core.errors import ValidationError
from ghedit.models.collection import IssueCollection
from ghedit.models.issue import IssueState


class ChangeField(Enum):
    TITLE = "title"
    BODY = "body"
    STATE = "state"


@dataclass(frozen=True)
class EditedIssue:
    """One issue as it appears in the edited text.

    Fields left as None were not present in the edited representation and
    are not compared. state holds the raw token the user typed.
    """

    number: int
    title: str | None = None
    state: str | None = None
    body: str | None = None
    line: int | None = None


@dataclass(frozen=True)
class MutationIntent:
    """A single field-level change to send to the remote source."""

    number: int
    field: ChangeField
    value: str | IssueState


@dataclass(frozen=True)
class IssueChanges:
    """Changed fields of one issue; unchanged fields are None."""

    title: str | None = None
    body: str | None = None
    state: IssueState | None = None

    def is_empty(self) -> bool:
        return self.title is None and self.body is None and self.state is None

    def changed_fields(self) -> list[ChangeField]:
        fields: list[ChangeField] = []
        if self.title is not None:
            fields.append(ChangeField.TITLE)
        if self.body is not None:
            fields.append(ChangeField.BODY)
        if self.state is not None:
            fields.append(ChangeField.STATE)
        return fields

    def to_intents(self, number: int) -> list[MutationIntent]:
        intents: list[MutationIntent] = []
        if self.title is not None:
            intents.append(MutationIntent(number, ChangeField.TITLE, self.title))
        if self.body is not None:
            intents.append(MutationIntent(number, ChangeField.BODY, self.body))
        if self.state is not None:
            intents.append(MutationIntent(number, ChangeField.STATE, self.state))
        return intents


# Issue number -> changed fields. Only issues with at least one change appear.
ChangeSet = dict[int, IssueChanges]


def intents_for(changes: ChangeSet) -> list[MutationIntent]:
    """Flatten a change set into mutation intents, ordered by issue then field."""
    intents: list[MutationIntent] = []
    for number, issue_changes in changes.items():
        intents.extend(issue_changes.to_intents(number))
    return intents


def normalize_body(body: str | None) -> str:
    """Body text as compared for changes: LF line endings, no trailing whitespace."""
    if body is None:
        return ""
    return body.replace("\r\n", "\n").rstrip()


def _where(entry: EditedIssue) -> str:
    if entry.line is None:
        return f"Issue #{entry.number}"
    return f"Line {entry.line}: issue #{entry.number}"


def compute_changes(edited: Iterable[EditedIssue], original: IssueCollection) -> ChangeSet:
    """Compute the minimal per-issue changes between edited text and original.

    Entries whose number is not in original are skipped: they cannot be
    addressed (stale or mistyped rows). Entries identical to the original are
    omitted from the result. Titles are compared without surrounding whitespace, which the text
    views do not preserve.

    Args:
        edited: Issues parsed from the edited text
        original: The collection the text was rendered from

    Returns:
        Mapping of issue number to its changed fields

    Raises:
        ValidationError: If any entry has a state other than open/closed (any
            casing) or an issue appears more than once. Carries every problem
            found, and no changes are returned.
    """
    changes: ChangeSet = {}
    errors: list[str] = []
    seen: set[int] = set()

    for entry in edited:
        issue = original.get(entry.number)
        if issue is None:
            continue

        if entry.number in seen:
            errors.append(f"{_where(entry)} appears more than once")
            continue
        seen.add(entry.number)

        new_state: IssueState | None = None
        if entry.state is not None:
            try:
                new_state = IssueState.parse(entry.state)
            except ValueError:
                errors.append(
                    f"{_where(entry)} has invalid state '{entry.state}' (must be OPEN or CLOSED)"
                )
                continue

        issue_changes = IssueChanges(
            title=(
                entry.title
                if entry.title is not None and entry.title.strip() != issue.title.strip()
                else None
            ),
            body=(
                entry.body
                if entry.body is not None
                and normalize_body(entry.body) != normalize_body(issue.body)
                else None
            ),
            state=new_state if new_state is not None and new_state is not issue.state else None,
        )
        if not issue_changes.is_empty():
            changes[entry.number] = issue_changes

    if errors:
        raise ValidationError(errors)
    return changes


def try_compute_changes(
    edited: Iterable[EditedIssue], original: IssueCollection
) -> tuple[ChangeSet | None, str | None]:
    """compute_changes() returning (changes, None) or (None, joined error message)."""
    try:
        return compute_changes(edited, original), None
    except ValidationError as e:
        return None, str(e)
