"""Load, edit and save issues through the cache and the remote source."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from ghedit.core.cache.store import TTLCacheStore
from ghedit.core.config import DEFAULT_CACHE_TTL_SECONDS
from ghedit.core.errors import GheditError
from ghedit.core.issues.abc import IssueSource
from ghedit.core.issues.types import CreateIssueResult, IssueTemplateRef, StateAction
from ghedit.models.collection import IssueCollection
from ghedit.models.filter_context import FilterContext, scope_prefix
from ghedit.models.issue import Issue
from ghedit.reconcile.changes import ChangeSet, compute_changes
from ghedit.reconcile.detail_view import parse_issue_detail
from ghedit.reconcile.dispatcher import DispatchResult, MutationDispatcher
from ghedit.reconcile.list_view import parse_issue_list
from ghedit.reconcile.templates import IssueTemplate, parse_issue_template, parse_new_issue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaveResult:
    """Outcome of saving edited text.

    Attributes:
        applied: Changes computed from the edit (attempted, not necessarily
            all successful)
        dispatch: Result of sending them, None when nothing changed
    """

    applied: ChangeSet
    dispatch: DispatchResult | None = None

    @property
    def no_changes(self) -> bool:
        return not self.applied

    @property
    def ok(self) -> bool:
        return self.dispatch is None or self.dispatch.ok


class IssueService:
    """Composes the cache, remote source and dispatcher for one scope.

    The scope is the repository ("owner/repo") passed to every gh call, or
    None for the repository of the current directory.
    """

    def __init__(
        self,
        source: IssueSource,
        cache: TTLCacheStore,
        dispatcher: MutationDispatcher,
        scope: str | None = None,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
    ) -> None:
        self._source = source
        self._cache = cache
        self._dispatcher = dispatcher
        self._scope = scope
        self._ttl_seconds = ttl_seconds

    @property
    def scope(self) -> str | None:
        return self._scope

    def cache_key(self, filter_context: FilterContext) -> str:
        return filter_context.cache_key(self._scope)

    async def load_list(
        self,
        filter_context: FilterContext,
        ttl: float | None = None,
        force: bool = False,
    ) -> IssueCollection:
        """Get the issue list for filter_context, from cache when fresh.

        Args:
            filter_context: Which issues to request
            ttl: Freshness override in seconds (None = configured TTL)
            force: Drop the cached entry first and always fetch

        Raises:
            FetchError: If the remote read fails (the cache is left untouched)
            DuplicateIssueError: If the response repeats an issue number
        """
        key = self.cache_key(filter_context)
        if force:
            self._cache.clear(key)

        async def fetch() -> IssueCollection:
            raw = await self._source.fetch_list(self._scope, filter_context)
            return IssueCollection.from_raw(raw)

        return await self._cache.get_or_fetch(
            key, fetch, self._ttl_seconds if ttl is None else ttl
        )

    async def save_list(
        self,
        lines: Iterable[str],
        original: IssueCollection,
        filter_context: FilterContext,
    ) -> SaveResult:
        """Apply an edited list to the remote.

        The cached list for filter_context is cleared only when every
        mutation succeeded; after a partial failure the next load shows the
        pre-save snapshot until it expires.

        Raises:
            ValidationError: If any row is invalid; nothing is sent
        """
        changes = compute_changes(parse_issue_list(lines), original)
        if not changes:
            return SaveResult(applied=changes)

        dispatch = await self._dispatcher.apply(changes, self._scope)
        if dispatch.ok:
            self._cache.clear(self.cache_key(filter_context))
        else:
            logger.debug("Save had %d failure(s), keeping cache", len(dispatch.failures))
        return SaveResult(applied=changes, dispatch=dispatch)

    async def load_detail(self, number: int) -> Issue:
        """Fetch one issue with its body. Not cached.

        Raises:
            FetchError: If the remote read fails
        """
        raw = await self._source.fetch_one(self._scope, number)
        return Issue.from_raw(raw)

    async def save_detail(self, lines: Iterable[str], original: Issue) -> SaveResult:
        """Apply edited detail text (title and body) to the remote."""
        edited = parse_issue_detail(lines, original.number)
        changes = compute_changes([edited], IssueCollection([original]))
        if not changes:
            return SaveResult(applied=changes)

        dispatch = await self._dispatcher.apply(changes, self._scope)
        if dispatch.ok:
            self.clear_scope()
        return SaveResult(applied=changes, dispatch=dispatch)

    async def create_issue(
        self, text: str, template: IssueTemplate | None = None
    ) -> CreateIssueResult:
        """Create an issue from edited create-flow text.

        Raises:
            ValidationError: If the text has no usable title
            MutationError: If gh fails to create the issue
        """
        fields = parse_new_issue(text, template)
        result = await self._source.create(self._scope, fields)
        self.clear_scope()
        return result

    async def list_templates(self) -> list[IssueTemplateRef]:
        return await self._source.list_templates(self._scope)

    async def find_template(self, name: str) -> IssueTemplateRef:
        """Look up a template by file name, with or without ".md".

        Raises:
            GheditError: If no template has that name
        """
        refs = await self.list_templates()
        for ref in refs:
            if name in (ref.name, ref.stem):
                return ref
        available = ", ".join(ref.stem for ref in refs) or "none"
        raise GheditError(f"Template '{name}' not found (available: {available})")

    async def load_template(self, ref: IssueTemplateRef) -> IssueTemplate:
        """Fetch and parse a template.

        Raises:
            FetchError: If the template cannot be read
            ValidationError: If its frontmatter is invalid
        """
        text = await self._source.fetch_template(ref)
        return parse_issue_template(text)

    async def delete_issue(self, number: int) -> None:
        await self._source.delete(self._scope, number)
        self.clear_scope()

    async def set_state(self, number: int, action: StateAction) -> None:
        await self._source.transition_state(self._scope, number, action)
        self.clear_scope()

    def clear_scope(self) -> list[str]:
        """Drop every cached list of this scope, whatever its filters."""
        removed = self._cache.clear_prefix(scope_prefix(self._scope))
        if removed:
            logger.debug("Invalidated %s", ", ".join(removed))
        return removed
