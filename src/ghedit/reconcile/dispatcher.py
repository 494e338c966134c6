"""Apply a change set to the remote issue source concurrently."""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum

from ghedit.core.issues.abc import IssueSource
from ghedit.core.issues.types import IssueField, StateAction
from ghedit.models.issue import IssueState
from ghedit.reconcile.changes import ChangeField, ChangeSet, MutationIntent, intents_for

logger = logging.getLogger(__name__)

DEFAULT_DISPATCH_TIMEOUT_SECONDS = 5.0


class FailureKind(Enum):
    ERROR = "error"
    TIMEOUT = "timeout"


@dataclass(frozen=True)
class MutationFailure:
    """A mutation that failed or did not settle within the timeout."""

    number: int
    field: ChangeField
    message: str
    kind: FailureKind = FailureKind.ERROR

    def describe(self) -> str:
        return f"{self.number}/{self.field.value}: {self.message}"


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of applying one change set.

    Attributes:
        failures: Every mutation that did not succeed, in intent order
        succeeded: Mutations that completed successfully
    """

    failures: tuple[MutationFailure, ...] = ()
    succeeded: tuple[MutationIntent, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def errors(self) -> list[str]:
        """Failures formatted as "<number>/<field>: <message>"."""
        return [failure.describe() for failure in self.failures]

    @property
    def timed_out(self) -> bool:
        return any(failure.kind is FailureKind.TIMEOUT for failure in self.failures)


class MutationDispatcher:
    """Sends one remote call per changed (issue, field) pair.

    All calls run concurrently. The dispatcher stops waiting after
    timeout_seconds; calls still running at that point are reported as
    TIMEOUT failures and are left to finish on their own. No rollback is
    attempted for partial failures.

    The dispatcher knows nothing about cache keys. Callers invalidate their
    cache entries when the result is ok.
    """

    def __init__(
        self,
        source: IssueSource,
        timeout_seconds: float = DEFAULT_DISPATCH_TIMEOUT_SECONDS,
    ) -> None:
        self._source = source
        self._timeout_seconds = timeout_seconds

    async def apply(self, changes: ChangeSet, scope: str | None) -> DispatchResult:
        intents = intents_for(changes)
        if not intents:
            return DispatchResult()

        tasks = {
            asyncio.ensure_future(self._send(intent, scope)): intent for intent in intents
        }
        done, pending = await asyncio.wait(tasks, timeout=self._timeout_seconds)

        failures: list[MutationFailure] = []
        succeeded: list[MutationIntent] = []
        for task, intent in tasks.items():
            if task in pending:
                failures.append(
                    MutationFailure(
                        number=intent.number,
                        field=intent.field,
                        message=f"timed out after {self._timeout_seconds:g}s",
                        kind=FailureKind.TIMEOUT,
                    )
                )
                continue
            error = task.exception()
            if error is None:
                succeeded.append(intent)
            else:
                failures.append(
                    MutationFailure(number=intent.number, field=intent.field, message=str(error))
                )

        if pending:
            logger.warning(
                "%d mutation(s) still running after %gs; results will be discarded",
                len(pending),
                self._timeout_seconds,
            )
            for task in pending:
                task.add_done_callback(_discard_result)

        return DispatchResult(failures=tuple(failures), succeeded=tuple(succeeded))

    async def _send(self, intent: MutationIntent, scope: str | None) -> None:
        if intent.field is ChangeField.STATE:
            assert isinstance(intent.value, IssueState)
            action = StateAction.for_target(intent.value)
            await self._source.transition_state(scope, intent.number, action)
            return
        assert isinstance(intent.value, str)
        await self._source.mutate_field(
            scope, intent.number, IssueField(intent.field.value), intent.value
        )


def _discard_result(task: "asyncio.Future[None]") -> None:
    if not task.cancelled() and task.exception() is not None:
        logger.debug("Late mutation failure ignored: %s", task.exception())
