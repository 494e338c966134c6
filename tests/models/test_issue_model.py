"""Tests for the Issue model and its nested value types."""

from datetime import UTC, datetime

import pytest

from ghedit.models.issue import Issue, IssueState, Label, parse_timestamp
from tests.test_utils.issue_builders import raw_issue


@pytest.mark.parametrize("token", ["open", "OPEN", "Open", " open "])
def test_state_parse_is_case_insensitive(token: str) -> None:
    assert IssueState.parse(token) is IssueState.OPEN


def test_state_parse_rejects_unknown_token() -> None:
    with pytest.raises(ValueError, match="Invalid state 'MAYBE'"):
        IssueState.parse("MAYBE")


def test_state_from_raw_defaults_to_open() -> None:
    assert IssueState.from_raw(None) is IssueState.OPEN
    assert IssueState.from_raw("MERGED") is IssueState.OPEN
    assert IssueState.from_raw("CLOSED") is IssueState.CLOSED


def test_from_raw_parses_nested_fields() -> None:
    data = raw_issue(
        7,
        "Fix sidebar",
        "CLOSED",
        body="Details",
        labels=["bug", "ui"],
        assignees=["alice"],
        author="bob",
        milestone="v1.0",
        createdAt="2024-01-01T00:00:00Z",
        url="https://github.com/owner/repo/issues/7",
    )

    issue = Issue.from_raw(data)

    assert issue.number == 7
    assert issue.title == "Fix sidebar"
    assert issue.is_closed()
    assert issue.body == "Details"
    assert issue.label_names == frozenset({"bug", "ui"})
    assert issue.assignee_logins == frozenset({"alice"})
    assert issue.author_login == "bob"
    assert issue.milestone is not None
    assert issue.milestone.title == "v1.0"
    assert issue.url == "https://github.com/owner/repo/issues/7"


def test_to_raw_reproduces_input_keys() -> None:
    data = raw_issue(
        3,
        "Title",
        body="Body",
        labels=["bug"],
        author="bob",
        comments=[{"author": {"login": "carol"}, "body": "+1", "createdAt": "2024-02-01T00:00:00Z"}],
        updatedAt="2024-02-02T00:00:00Z",
    )

    assert Issue.from_raw(data).to_raw() == data


def test_to_raw_without_source_keys_omits_unset_optionals() -> None:
    issue = Issue(number=1, title="A")

    assert issue.to_raw() == {
        "number": 1,
        "title": "A",
        "state": "OPEN",
        "labels": [],
        "assignees": [],
    }


def test_issue_is_immutable() -> None:
    issue = Issue.from_raw(raw_issue(1, "A"))

    with pytest.raises(AttributeError):
        issue.title = "B"  # type: ignore[misc]

    changed = issue.with_changes(title="B")
    assert changed.title == "B"
    assert issue.title == "A"


def test_predicates() -> None:
    issue = Issue.from_raw(raw_issue(1, "A", labels=["bug"], assignees=["alice"]))

    assert issue.has_label("bug")
    assert not issue.has_label("docs")
    assert issue.is_assigned()
    assert issue.is_assigned_to("alice")
    assert not issue.has_milestone()
    assert issue.comment_count() == 0


def test_label_from_bare_name() -> None:
    assert Label.from_raw("bug") == Label(name="bug")


def test_parse_timestamp() -> None:
    assert parse_timestamp("2024-01-02T03:04:05Z") == datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
    assert parse_timestamp(None) is None
