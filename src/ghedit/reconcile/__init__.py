"""Turn edited issue text into remote mutations."""

from ghedit.reconcile.changes import (
    ChangeField,
    ChangeSet,
    EditedIssue,
    IssueChanges,
    MutationIntent,
    compute_changes,
    intents_for,
    try_compute_changes,
)
from ghedit.reconcile.dispatcher import (
    DispatchResult,
    FailureKind,
    MutationDispatcher,
    MutationFailure,
)

__all__ = [
    "ChangeField",
    "ChangeSet",
    "DispatchResult",
    "EditedIssue",
    "FailureKind",
    "IssueChanges",
    "MutationDispatcher",
    "MutationFailure",
    "MutationIntent",
    "compute_changes",
    "intents_for",
    "try_compute_changes",
]
