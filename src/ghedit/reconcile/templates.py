"""Issue templates with YAML frontmatter, and the create-issue text form."""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import frontmatter
import yaml

from ghedit.core.errors import ValidationError
from ghedit.core.issues.types import NewIssue
from ghedit.reconcile.detail_view import parse_title_and_body

TEMPLATE_KEYS = frozenset(
    {"name", "about", "title", "labels", "assignees", "projects", "milestone"}
)
PLACEHOLDER_TITLE = "Issue Title"


@dataclass(frozen=True)
class IssueTemplate:
    """Parsed issue template.

    Attributes:
        body: Markdown below the frontmatter
        title: Title prefix to pre-fill (e.g. "[Bug] ")
        name, about: Descriptive fields shown when choosing a template
    """

    body: str = ""
    title: str | None = None
    labels: tuple[str, ...] = ()
    assignees: tuple[str, ...] = ()
    projects: tuple[str, ...] = ()
    milestone: str | None = None
    name: str | None = None
    about: str | None = None


def _as_names(key: str, value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    elif isinstance(value, list):
        items = value
    else:
        raise ValidationError([f"Template field '{key}' must be a string or a list"])
    return tuple(str(item).strip() for item in items if str(item).strip())


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_issue_template(text: str) -> IssueTemplate:
    """Parse template text, with or without a frontmatter block.

    Raises:
        ValidationError: If the frontmatter is not valid YAML or uses keys
            other than name, about, title, labels, assignees, projects and
            milestone
    """
    try:
        post = frontmatter.loads(text)
    except yaml.YAMLError as e:
        raise ValidationError([f"Invalid template frontmatter: {e}"]) from e

    unknown = sorted(key for key in post.metadata if key not in TEMPLATE_KEYS)
    if unknown:
        raise ValidationError([f"Invalid frontmatter field: {key}" for key in unknown])

    metadata = post.metadata
    return IssueTemplate(
        body=post.content,
        title=_as_text(metadata.get("title")),
        labels=_as_names("labels", metadata.get("labels")),
        assignees=_as_names("assignees", metadata.get("assignees")),
        projects=_as_names("projects", metadata.get("projects")),
        milestone=_as_text(metadata.get("milestone")),
        name=_as_text(metadata.get("name")),
        about=_as_text(metadata.get("about")),
    )


def render_new_issue(template: IssueTemplate | None = None) -> str:
    """Initial text for the create flow: title heading, blank line, body."""
    if template is None:
        template = IssueTemplate()
    title = template.title or PLACEHOLDER_TITLE
    if template.body:
        return f"# {title}\n\n{template.body}\n"
    return f"# {title}\n\n"


def parse_new_issue(text: str, template: IssueTemplate | None = None) -> NewIssue:
    """Build the create request from edited text plus template metadata.

    Raises:
        ValidationError: If the title is missing or still the placeholder
    """
    title, body = parse_title_and_body(text.splitlines())
    if not title or title == PLACEHOLDER_TITLE:
        raise ValidationError(["Please provide a valid issue title"])
    if template is None:
        template = IssueTemplate()
    return NewIssue(
        title=title,
        body=body,
        labels=template.labels,
        assignees=template.assignees,
        milestone=template.milestone,
        projects=template.projects,
    )
