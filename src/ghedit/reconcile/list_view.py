"""Editable text form of an issue list.

Each issue is one row:

    #07 │ OPEN │ Fix the sidebar

Numbers are zero-padded to the widest number in the list. Lines starting
with "# " are comments (filter summary and help) and are skipped on parse,
as are blank lines and anything else that is not a row.
"""

import re
from collections.abc import Iterable

from ghedit.models.collection import IssueCollection
from ghedit.models.filter_context import FilterContext
from ghedit.reconcile.changes import EditedIssue

SEPARATOR = "│"

# The state cell is whatever lies between the first two separators
_ROW_RE = re.compile(r"^#(\d+)\s*[│|]\s*([^│|]*?)\s*[│|]\s*(.*?)\s*$")
# A single separator: "#7 │ title" edits the title only
_TITLE_ONLY_RE = re.compile(r"^#(\d+)\s*[│|]\s*([^│|]*?)\s*$")


def format_issue_row(number: int, state: str, title: str, width: int = 0) -> str:
    return f"#{number:0{width}d} {SEPARATOR} {state} {SEPARATOR} {title}"


def render_issue_list(
    collection: IssueCollection,
    filter_context: FilterContext | None = None,
    repo: str | None = None,
) -> list[str]:
    """Render a collection as editable lines, header first."""
    lines = [f"# Issues in {repo or 'current repository'}"]
    if filter_context is not None:
        lines.append(f"# Filter: {filter_context.describe()}")
    lines.extend(
        [
            "# Edit titles or change OPEN/CLOSED, then save and quit to apply.",
            "# Rows removed or left unchanged are not touched.",
            "",
        ]
    )
    width = len(str(max(collection.numbers(), default=0)))
    for issue in collection:
        lines.append(format_issue_row(issue.number, issue.state.value, issue.title, width))
    return lines


def parse_issue_row(line: str, line_number: int | None = None) -> EditedIssue | None:
    """Parse one row, or return None if the line is not a row."""
    match = _ROW_RE.match(line)
    if match is not None:
        number_text, state, title = match.groups()
    else:
        match = _TITLE_ONLY_RE.match(line)
        if match is None:
            return None
        number_text, title = match.groups()
        state = None
    if not title:
        return None
    return EditedIssue(number=int(number_text), title=title, state=state, line=line_number)


def parse_issue_list(lines: Iterable[str]) -> list[EditedIssue]:
    """Parse edited list text into per-issue snapshots.

    Malformed rows are ignored rather than reported: header, help and
    separator lines share the text with issue rows.
    """
    edited: list[EditedIssue] = []
    for index, line in enumerate(lines, start=1):
        entry = parse_issue_row(line, line_number=index)
        if entry is not None:
            edited.append(entry)
    return edited
