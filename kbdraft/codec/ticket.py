from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Optional

from markdownify import markdownify as html_to_md

from ..models.article import JiraTicket

NO_DESCRIPTION = "[No description provided in ticket]"
NO_RESOLUTION = "[No resolution note found in ticket comments]"

_HTML_TAG_RE = re.compile(r"</?(p|div|br|ul|ol|li|h[1-6]|pre|code|strong|em|a|table)\b[^>]*>", re.I)


def load_ticket(path: str | Path) -> JiraTicket:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    # accept raw Jira issue JSON as well as the flattened form
    if "fields" in data:
        fields = data["fields"] or {}
        comments = (fields.get("comment") or {}).get("comments") or []
        data = {
            "key": data.get("key", ""),
            "summary": fields.get("summary", ""),
            "description": fields.get("description"),
            "labels": fields.get("labels") or [],
            "comments": comments,
        }
    return JiraTicket.from_dict(data)


def _to_markdown(text) -> Optional[str]:
    """
    Jira rendered fields come back as HTML; plain text passes through.
    Anything that is not a string (REST v3 ADF documents) is treated as absent.
    """
    if not isinstance(text, str) or not text:
        return None
    if not _HTML_TAG_RE.search(text):
        return text.strip()
    return html_to_md(text, heading_style="ATX", bullets="-").strip()


def ticket_to_markdown(ticket: JiraTicket) -> str:
    """
    Seed an article from a ticket: summary as title, description as the
    problem, the last comment as the solution, labels as a ``## Tags``
    section.
    """
    description = _to_markdown(ticket.description) or NO_DESCRIPTION
    last = ticket.comments[-1] if ticket.comments else None
    last_comment = last.get("body") if isinstance(last, dict) else None
    resolution = _to_markdown(last_comment) or NO_RESOLUTION

    return (
        f"# {ticket.summary}\n\n"
        f"## Problem\n{description}\n\n"
        f"## Solution\n{resolution}\n\n"
        f"## Tags\n{', '.join(ticket.labels)}"
    ).strip()
