"""Editable text form of a single issue: title heading, blank line, body."""

import re
from collections.abc import Iterable

from ghedit.models.issue import Issue
from ghedit.reconcile.changes import EditedIssue

METADATA_START = "<!-- ghedit"
METADATA_END = "-->"

_TITLE_RE = re.compile(r"^#\s+(.*?)\s*$")


def _metadata_lines(issue: Issue) -> list[str]:
    lines = [METADATA_START, f"issue: #{issue.number}", f"state: {issue.state.value}"]
    if issue.author_login:
        lines.append(f"author: {issue.author_login}")
    if issue.labels:
        lines.append(f"labels: {', '.join(label.name for label in issue.labels)}")
    if issue.assignees:
        lines.append(f"assignees: {', '.join(user.login for user in issue.assignees)}")
    if issue.milestone is not None:
        lines.append(f"milestone: {issue.milestone.title}")
    if issue.created_at:
        lines.append(f"created: {issue.created_at}")
    if issue.updated_at:
        lines.append(f"updated: {issue.updated_at}")
    if issue.url:
        lines.append(f"url: {issue.url}")
    lines.append(METADATA_END)
    return lines


def render_issue_detail(issue: Issue, include_metadata: bool = True) -> list[str]:
    """Render an issue as lines.

    The read-only metadata block comes first and is ignored when parsing.
    """
    lines = _metadata_lines(issue) if include_metadata else []
    lines.append(f"# {issue.title}")
    lines.append("")
    if issue.body:
        lines.extend(issue.body.splitlines())
    return lines


def _strip_metadata(lines: list[str]) -> list[str]:
    if not lines or not lines[0].startswith(METADATA_START):
        return lines
    for index, line in enumerate(lines):
        if line.strip() == METADATA_END:
            return lines[index + 1 :]
    # Unterminated block: treat everything as metadata
    return []


def parse_title_and_body(lines: Iterable[str]) -> tuple[str, str]:
    """Extract (title, body) from detail text.

    The first "# " heading is the title. The body is everything after the
    first blank line that follows the title, with trailing blank lines
    removed. Missing parts come back as empty strings.
    """
    title = ""
    body_lines: list[str] = []
    in_body = False
    for line in _strip_metadata(list(lines)):
        if in_body:
            body_lines.append(line)
            continue
        if not title:
            match = _TITLE_RE.match(line)
            if match is not None:
                title = match.group(1)
            continue
        if line.strip() == "":
            in_body = True
        else:
            # Body started without a separator line
            in_body = True
            body_lines.append(line)
    while body_lines and not body_lines[-1].strip():
        body_lines.pop()
    return title, "\n".join(body_lines)


def parse_issue_detail(lines: Iterable[str], number: int) -> EditedIssue:
    """Parse edited detail text into a snapshot with title and body only.

    An empty title means the heading was removed; it is treated as not
    edited rather than as a request to blank the title.
    """
    title, body = parse_title_and_body(lines)
    return EditedIssue(number=number, title=title or None, body=body)
