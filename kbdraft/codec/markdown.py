from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional

from ..models.article import UNTITLED, ParsedArticle
from .grammar import HEADINGS, canonical_section

WarningCallback = Callable[[str], None]

_TITLE_RE = re.compile(r"^#\s+")
_SECTION_RE = re.compile(r"^##\s+")

OPTIONAL_SECTIONS = ("expected_result", "prerequisites", "additional_notes")


def serialize(article) -> str:
    """
    Compose the article Markdown: H1 title, Problem, Solution, then the
    optional sections that have content, in a fixed order.

    Tags are carried separately and are never written here. Accepts any
    object with the article field attributes (Article, ParsedArticle).
    """
    blocks = [
        f"# {article.title}",
        f"## {HEADINGS['problem']}\n{article.problem}",
        f"## {HEADINGS['solution']}\n{article.solution}",
    ]
    for name in OPTIONAL_SECTIONS:
        value = getattr(article, name, None)
        if value:
            blocks.append(f"## {HEADINGS[name]}\n{value}")
    return "\n\n".join(blocks).strip()


def split_tags(text: str) -> List[str]:
    return [t.strip() for t in text.split(",") if t.strip()]


def parse(markdown: str, on_warning: Optional[WarningCallback] = None) -> ParsedArticle:
    """
    Recover article fields from free-form Markdown.

    Never raises. The first ``# `` heading is the title; ``## `` headings open
    sections resolved through the alias table, and unknown sections are
    dropped. A field seen twice (same header or an alias of it) gets the new
    content appended after a blank line; tags are concatenated as-is.

    This is not the inverse of serialize(): header spelling, whitespace and
    unknown sections are lost, so ``serialize(parse(md))`` generally differs
    from ``md``.
    """
    title = ""
    fields: Dict[str, str] = {name: "" for name in HEADINGS if name != "tags"}
    tags: List[str] = []
    seen: set[str] = set()

    header: Optional[str] = None
    buffer: List[str] = []

    def close_section() -> None:
        nonlocal tags
        if header is None:
            return
        content = "\n".join(buffer).strip()
        if not content:
            return
        canonical = canonical_section(header)
        if canonical is None:
            return
        if canonical in seen and on_warning is not None:
            on_warning(f'Duplicate section found: "{header}". Appending content to existing section.')
        if canonical == "tags":
            tags = tags + split_tags(content)
        elif canonical in seen:
            fields[canonical] = f"{fields[canonical]}\n\n{content}"
        else:
            fields[canonical] = content
        seen.add(canonical)

    for line in markdown.replace("\r\n", "\n").split("\n"):
        if not title and _TITLE_RE.match(line):
            title = re.sub(r"^#+\s*", "", line).strip()
            continue

        if _SECTION_RE.match(line):
            close_section()
            header = _SECTION_RE.sub("", line).strip()
            buffer = []
            continue

        if header is not None:
            buffer.append(line)

    close_section()

    return ParsedArticle(
        title=title or UNTITLED,
        tags=tags,
        **fields,
    )
