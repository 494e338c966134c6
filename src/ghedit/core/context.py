"""Application context with dependency injection."""

import os
from dataclasses import dataclass

from ghedit.core.cache.store import TTLCacheStore
from ghedit.core.config import (
    ConfigStore,
    FilesystemConfigStore,
    GheditConfig,
    InMemoryConfigStore,
    load_config,
)
from ghedit.core.issue_service import IssueService
from ghedit.core.issues.abc import IssueSource
from ghedit.core.issues.dry_run import DryRunIssueSource
from ghedit.core.issues.real import RealIssueSource
from ghedit.core.time.abc import Time
from ghedit.core.time.real import RealTime
from ghedit.reconcile.dispatcher import MutationDispatcher


@dataclass(frozen=True)
class GheditContext:
    """Immutable context holding all dependencies for ghedit operations.

    Created at CLI entry point and threaded through the application via
    click's obj. The cache lives here, so it spans one process.
    """

    issues: IssueSource
    cache: TTLCacheStore
    time: Time
    config_store: ConfigStore
    config: GheditConfig
    dry_run: bool

    @property
    def repo(self) -> str | None:
        return self.config.repo

    def issue_service(self) -> IssueService:
        return IssueService(
            source=self.issues,
            cache=self.cache,
            dispatcher=MutationDispatcher(
                self.issues, timeout_seconds=self.config.dispatch_timeout_seconds
            ),
            scope=self.config.repo,
            ttl_seconds=self.config.cache_ttl_seconds,
        )

    @staticmethod
    def for_test(
        issues: IssueSource | None = None,
        cache: TTLCacheStore | None = None,
        time: Time | None = None,
        config_store: ConfigStore | None = None,
        config: GheditConfig | None = None,
        dry_run: bool = False,
    ) -> "GheditContext":
        """Create test context with optional pre-configured integration classes.

        Args:
            issues: Optional IssueSource. If None, creates empty FakeIssueSource.
            cache: Optional cache. If None, creates one on the test clock.
            time: Optional Time implementation. If None, creates FakeTime.
            config_store: Optional ConfigStore. If None, InMemoryConfigStore
                holding config.
            config: Optional GheditConfig. If None, uses defaults.
            dry_run: Whether to wrap issues in DryRunIssueSource.

        Example:
            >>> source = FakeIssueSource(issues={1: {"number": 1, "title": "A"}})
            >>> ctx = GheditContext.for_test(issues=source)
        """
        from ghedit.core.issues.fake import FakeIssueSource
        from ghedit.core.time.fake import FakeTime

        if issues is None:
            issues = FakeIssueSource()

        if time is None:
            time = FakeTime()

        if cache is None:
            cache = TTLCacheStore(time=time)

        if config is None:
            config = GheditConfig()

        if config_store is None:
            config_store = InMemoryConfigStore(config=config)

        if dry_run:
            issues = DryRunIssueSource(issues)

        return GheditContext(
            issues=issues,
            cache=cache,
            time=time,
            config_store=config_store,
            config=config,
            dry_run=dry_run,
        )

    def with_repo(self, repo: str | None) -> "GheditContext":
        """Copy of this context addressing repo instead of the configured one."""
        if repo is None:
            return self
        return GheditContext(
            issues=self.issues,
            cache=self.cache,
            time=self.time,
            config_store=self.config_store,
            config=GheditConfig(**{**self.config.to_dict(), "repo": repo}),
            dry_run=self.dry_run,
        )


def create_context(*, dry_run: bool, repo: str | None = None) -> GheditContext:
    """Create production context with real implementations.

    Args:
        dry_run: If True, wrap the issue source so writes are printed, not run
        repo: Repository from the command line, overriding config and env

    Raises:
        ValueError: If the config file or GHEDIT_* variables are malformed
    """
    config_store = FilesystemConfigStore()
    config = load_config(config_store, os.environ)

    issues: IssueSource = RealIssueSource()
    if dry_run:
        issues = DryRunIssueSource(issues)

    time = RealTime()
    ctx = GheditContext(
        issues=issues,
        cache=TTLCacheStore(time=time),
        time=time,
        config_store=config_store,
        config=config,
        dry_run=dry_run,
    )
    return ctx.with_repo(repo)
