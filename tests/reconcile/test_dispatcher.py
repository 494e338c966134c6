"""Tests for MutationDispatcher concurrency, failure aggregation and timeouts."""

from ghedit.core.issues.fake import FakeIssueSource
from ghedit.core.issues.types import IssueField, StateAction
from ghedit.models.issue import IssueState
from ghedit.reconcile.changes import ChangeField, IssueChanges, MutationIntent
from ghedit.reconcile.dispatcher import FailureKind, MutationDispatcher
from tests.test_utils.issue_builders import issues_by_number, raw_issue


async def test_applies_every_changed_field() -> None:
    source = FakeIssueSource(
        issues=issues_by_number(raw_issue(5, "Old"), raw_issue(6, "Six", body="b"))
    )
    dispatcher = MutationDispatcher(source)

    result = await dispatcher.apply(
        {
            5: IssueChanges(title="New", state=IssueState.CLOSED),
            6: IssueChanges(body="new body"),
        },
        scope="owner/repo",
    )

    assert result.ok
    assert result.errors == []
    assert len(result.succeeded) == 3
    assert sorted(source.field_updates, key=lambda update: update[0]) == [
        (5, IssueField.TITLE, "New"),
        (6, IssueField.BODY, "new body"),
    ]
    assert source.state_transitions == [(5, StateAction.CLOSE)]
    assert source.issues[5]["state"] == "CLOSED"


async def test_reopen_uses_reopen_action() -> None:
    source = FakeIssueSource(issues=issues_by_number(raw_issue(7, "Seven", "CLOSED")))

    result = await MutationDispatcher(source).apply(
        {7: IssueChanges(state=IssueState.OPEN)}, scope=None
    )

    assert result.ok
    assert source.state_transitions == [(7, StateAction.REOPEN)]


async def test_partial_failure_is_reported_per_field() -> None:
    """Title succeeds, state fails: the failure is attributed and nothing is reverted."""
    source = FakeIssueSource(
        issues=issues_by_number(raw_issue(5, "Old")),
        mutation_errors={(5, "state"): "GraphQL: Could not close issue"},
    )

    result = await MutationDispatcher(source).apply(
        {5: IssueChanges(title="X", state=IssueState.CLOSED)}, scope=None
    )

    assert not result.ok
    assert result.errors == ["5/state: GraphQL: Could not close issue"]
    assert result.succeeded == (MutationIntent(5, ChangeField.TITLE, "X"),)
    assert source.field_updates == [(5, IssueField.TITLE, "X")]
    assert source.issues[5]["title"] == "X"
    assert source.issues[5]["state"] == "OPEN"


async def test_missing_issue_fails_only_that_issue() -> None:
    source = FakeIssueSource(issues=issues_by_number(raw_issue(1, "A")))

    result = await MutationDispatcher(source).apply(
        {1: IssueChanges(title="A2"), 2: IssueChanges(title="B2")}, scope=None
    )

    assert result.errors == ["2/title: Issue #2 not found"]
    assert source.issues[1]["title"] == "A2"


async def test_timeout_reports_unsettled_calls_as_failures() -> None:
    source = FakeIssueSource(
        issues=issues_by_number(raw_issue(5, "Old")),
        hanging={(5, "body")},
    )

    result = await MutationDispatcher(source, timeout_seconds=0.05).apply(
        {5: IssueChanges(title="New", body="never lands")}, scope=None
    )

    assert not result.ok
    assert result.timed_out
    assert result.errors == ["5/body: timed out after 0.05s"]
    assert result.failures[0].kind is FailureKind.TIMEOUT
    assert source.field_updates == [(5, IssueField.TITLE, "New")]


async def test_empty_change_set_makes_no_calls() -> None:
    source = FakeIssueSource()

    result = await MutationDispatcher(source).apply({}, scope=None)

    assert result.ok
    assert result.succeeded == ()
