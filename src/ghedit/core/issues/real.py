"""Production implementation of the issue source using gh CLI."""

import base64
import binascii
import json
import logging
import re
from pathlib import Path
from typing import Any

from ghedit.core.errors import FetchError, MutationError
from ghedit.core.issues.abc import IssueSource
from ghedit.core.issues.types import (
    CreateIssueResult,
    IssueField,
    IssueTemplateRef,
    NewIssue,
    StateAction,
)
from ghedit.core.subprocess_utils import execute_gh_command
from ghedit.models.filter_context import FilterContext
from ghedit.models.issue import RawIssue

LIST_JSON_FIELDS = "number,title,state,labels,assignees,author,milestone,createdAt,updatedAt,url"
VIEW_JSON_FIELDS = (
    "number,id,title,body,state,stateReason,labels,assignees,author,milestone,"
    "comments,createdAt,updatedAt,closedAt,url"
)

_ISSUE_URL_RE = re.compile(r"https://[^/\s]+/[^/\s]+/[^/\s]+/issues/(\d+)")
TEMPLATE_DIR = ".github/ISSUE_TEMPLATE"

logger = logging.getLogger(__name__)


def _with_repo(cmd: list[str], scope: str | None) -> list[str]:
    if scope:
        cmd.extend(["--repo", scope])
    return cmd


def _contents_endpoint(repo: str | None, path: str) -> str:
    # gh fills in the {owner}/{repo} placeholders from the current directory
    target = repo if repo else "{owner}/{repo}"
    return f"repos/{target}/contents/{path}"


def parse_create_output(stdout: str) -> CreateIssueResult:
    """Extract the issue number from the URL `gh issue create` prints.

    Raises:
        MutationError: If no issue URL is found in the output
    """
    match = _ISSUE_URL_RE.search(stdout)
    if match is None:
        raise MutationError(f"Could not find issue URL in gh output: {stdout.strip()!r}")
    return CreateIssueResult(number=int(match.group(1)), url=match.group(0))


class RealIssueSource(IssueSource):
    """Production implementation using gh CLI.

    All operations execute actual gh commands via asyncio subprocesses.
    gh failures surface as FetchError for reads and MutationError for writes.
    """

    def __init__(self, cwd: Path | None = None) -> None:
        """Initialize the source.

        Args:
            cwd: Directory searched for local issue templates (None = process cwd)
        """
        self._cwd = cwd

    def _root(self) -> Path:
        return self._cwd if self._cwd is not None else Path.cwd()

    async def _read_json(self, cmd: list[str]) -> Any:
        try:
            stdout = await execute_gh_command(cmd)
        except RuntimeError as e:
            raise FetchError(str(e)) from e
        try:
            return json.loads(stdout)
        except json.JSONDecodeError as e:
            raise FetchError(f"Failed to parse JSON response from '{' '.join(cmd)}'") from e

    async def _write(self, cmd: list[str]) -> str:
        try:
            return await execute_gh_command(cmd)
        except RuntimeError as e:
            raise MutationError(str(e)) from e

    async def fetch_list(self, scope: str | None, filter_context: FilterContext) -> list[RawIssue]:
        cmd = ["gh", "issue", "list", "--json", LIST_JSON_FIELDS, *filter_context.to_gh_args()]
        data = await self._read_json(_with_repo(cmd, scope))
        if not isinstance(data, list):
            raise FetchError("Expected a JSON array from gh issue list")
        return data

    async def fetch_one(self, scope: str | None, number: int) -> RawIssue:
        cmd = ["gh", "issue", "view", str(number), "--json", VIEW_JSON_FIELDS]
        data = await self._read_json(_with_repo(cmd, scope))
        if not isinstance(data, dict):
            raise FetchError(f"Expected a JSON object from gh issue view {number}")
        return data

    async def mutate_field(
        self, scope: str | None, number: int, field: IssueField, value: str
    ) -> None:
        cmd = ["gh", "issue", "edit", str(number), f"--{field.value}", value]
        await self._write(_with_repo(cmd, scope))

    async def transition_state(self, scope: str | None, number: int, action: StateAction) -> None:
        cmd = ["gh", "issue", action.value, str(number)]
        await self._write(_with_repo(cmd, scope))

    async def create(self, scope: str | None, fields: NewIssue) -> CreateIssueResult:
        cmd = ["gh", "issue", "create", "--title", fields.title, "--body", fields.body]
        for label in fields.labels:
            cmd.extend(["--label", label])
        for assignee in fields.assignees:
            cmd.extend(["--assignee", assignee])
        if fields.milestone:
            cmd.extend(["--milestone", fields.milestone])
        for project in fields.projects:
            cmd.extend(["--project", project])
        stdout = await self._write(_with_repo(cmd, scope))
        return parse_create_output(stdout)

    async def delete(self, scope: str | None, number: int) -> None:
        cmd = ["gh", "issue", "delete", str(number), "--yes"]
        await self._write(_with_repo(cmd, scope))

    async def current_user(self) -> str | None:
        try:
            stdout = await execute_gh_command(["gh", "api", "user", "--jq", ".login"])
        except RuntimeError:
            return None
        login = stdout.strip()
        return login or None

    async def _remote_templates(self, repo: str | None) -> list[IssueTemplateRef]:
        try:
            data = await self._read_json(["gh", "api", _contents_endpoint(repo, TEMPLATE_DIR)])
        except FetchError as e:
            logger.debug("No issue templates in %s: %s", repo or "current repository", e)
            return []
        if not isinstance(data, list):
            return []
        return [
            IssueTemplateRef(name=entry["name"], path=entry["path"], repo=repo)
            for entry in data
            if isinstance(entry, dict)
            and entry.get("type") == "file"
            and str(entry.get("name", "")).endswith(".md")
        ]

    def _local_templates(self) -> list[IssueTemplateRef]:
        directory = self._root() / TEMPLATE_DIR
        if not directory.is_dir():
            return []
        return [
            IssueTemplateRef(name=path.name, path=f"{TEMPLATE_DIR}/{path.name}", local=True)
            for path in sorted(directory.glob("*.md"))
        ]

    def _read_local(self, path: str) -> str | None:
        local_path = self._root() / path
        if not local_path.is_file():
            return None
        return local_path.read_text(encoding="utf-8")

    async def list_templates(self, scope: str | None) -> list[IssueTemplateRef]:
        refs = await self._remote_templates(scope)
        if not refs and scope and "/" in scope:
            owner = scope.split("/", 1)[0]
            if scope != f"{owner}/.github":
                refs = await self._remote_templates(f"{owner}/.github")
        if not refs:
            refs = self._local_templates()
        return refs

    async def fetch_template(self, ref: IssueTemplateRef) -> str:
        if ref.local:
            text = self._read_local(ref.path)
            if text is None:
                raise FetchError(f"Template {ref.path} not found in {self._root()}")
            return text

        try:
            data = await self._read_json(["gh", "api", _contents_endpoint(ref.repo, ref.path)])
        except FetchError:
            text = self._read_local(ref.path)
            if text is None:
                raise
            return text

        content = data.get("content") if isinstance(data, dict) else None
        if not isinstance(content, str):
            raise FetchError(f"No content returned for template {ref.path}")
        try:
            raw = base64.b64decode("".join(content.split()), validate=True)
        except binascii.Error as e:
            raise FetchError(f"Template {ref.path} is not valid base64") from e
        return raw.decode("utf-8", errors="replace")
