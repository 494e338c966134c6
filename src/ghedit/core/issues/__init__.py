"""Remote issue data source backed by the gh CLI."""

from ghedit.core.issues.abc import IssueSource
from ghedit.core.issues.dry_run import DryRunIssueSource
from ghedit.core.issues.fake import FakeIssueSource
from ghedit.core.issues.real import RealIssueSource
from ghedit.core.issues.types import CreateIssueResult, IssueField, NewIssue, StateAction

__all__ = [
    "CreateIssueResult",
    "DryRunIssueSource",
    "FakeIssueSource",
    "IssueField",
    "IssueSource",
    "NewIssue",
    "RealIssueSource",
    "StateAction",
]
