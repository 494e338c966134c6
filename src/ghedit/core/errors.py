"""Error types raised by the ghedit core.

The integration layer raises these; the CLI layer catches GheditError, prints
the message and exits non-zero.
"""

from collections.abc import Sequence


class GheditError(Exception):
    """Base class for all errors surfaced to the user."""


class FetchError(GheditError):
    """A remote read (list or view) failed.

    The cache is never written when this is raised.
    """


class MutationError(GheditError):
    """A single remote mutation (edit, close, reopen, create, delete) failed."""


class ValidationError(GheditError):
    """Edited text contained invalid values.

    Carries every per-entry message so the user can fix all mistakes in one pass.
    """

    def __init__(self, messages: Sequence[str]) -> None:
        self.messages = list(messages)
        super().__init__("\n".join(self.messages))


class DuplicateIssueError(GheditError):
    """A fetch response contained the same issue number twice."""

    def __init__(self, number: int) -> None:
        self.number = number
        super().__init__(f"Duplicate issue #{number} in response")
