"""Issue data model: issues, collections and filter contexts."""

from ghedit.models.collection import SORT_KEYS, IssueCollection
from ghedit.models.filter_context import FilterContext, StateFilter, scope_key, scope_prefix
from ghedit.models.issue import (
    Comment,
    Issue,
    IssueState,
    Label,
    Milestone,
    RawIssue,
    User,
    parse_timestamp,
)

__all__ = [
    "SORT_KEYS",
    "Comment",
    "FilterContext",
    "Issue",
    "IssueCollection",
    "IssueState",
    "Label",
    "Milestone",
    "RawIssue",
    "StateFilter",
    "User",
    "parse_timestamp",
    "scope_key",
    "scope_prefix",
]
