"""Tests for DryRunIssueSource: reads pass through, writes are only printed."""

import pytest

from ghedit.core.issues.dry_run import DryRunIssueSource
from ghedit.core.issues.fake import FakeIssueSource
from ghedit.core.issues.types import IssueField, NewIssue, StateAction
from ghedit.models.filter_context import FilterContext
from tests.test_utils.issue_builders import issues_by_number, raw_issue


async def test_reads_are_delegated() -> None:
    fake = FakeIssueSource(issues=issues_by_number(raw_issue(1, "A")))
    source = DryRunIssueSource(fake)

    assert [issue["number"] for issue in await source.fetch_list(None, FilterContext())] == [1]
    assert (await source.fetch_one(None, 1))["title"] == "A"
    assert await source.current_user() == "testuser"


async def test_writes_are_printed_not_executed(capsys: pytest.CaptureFixture[str]) -> None:
    fake = FakeIssueSource(issues=issues_by_number(raw_issue(1, "A")))
    source = DryRunIssueSource(fake)

    await source.mutate_field(None, 1, IssueField.TITLE, "B")
    await source.transition_state(None, 1, StateAction.CLOSE)
    await source.delete(None, 1)
    result = await source.create(None, NewIssue(title="New"))

    err = capsys.readouterr().err
    assert "Would update title of issue #1" in err
    assert "Would close issue #1" in err
    assert "Would delete issue #1" in err
    assert "Would create issue 'New'" in err
    assert result.number == 1
    assert fake.field_updates == []
    assert fake.state_transitions == []
    assert fake.deleted_issues == []
    assert fake.issues[1]["title"] == "A"


async def test_template_reads_are_delegated() -> None:
    path = ".github/ISSUE_TEMPLATE/bug.md"
    source = DryRunIssueSource(FakeIssueSource(templates={path: "What happened?"}))

    refs = await source.list_templates("owner/repo")

    assert [ref.path for ref in refs] == [path]
    assert await source.fetch_template(refs[0]) == "What happened?"
