from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

UNTITLED = "Untitled Article"


@dataclass
class Article:
    title: str = ""
    problem: str = ""
    solution: str = ""
    expected_result: Optional[str] = None
    prerequisites: Optional[str] = None
    additional_notes: Optional[str] = None
    tags: List[str] = field(default_factory=list)
    content_markdown: str = ""
    template_id: Optional[str] = None
    ticket_key: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        """Body sent to the quality scorer (empty optionals go out as null)."""
        return {
            "ticket_key": self.ticket_key,
            "title": self.title,
            "problem": self.problem,
            "solution": self.solution,
            "expected_result": self.expected_result or None,
            "prerequisites": self.prerequisites or None,
            "additional_notes": self.additional_notes or None,
            "tags": list(self.tags),
            "content_markdown": self.content_markdown,
            "template_id": self.template_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Article":
        return cls(
            title=data.get("title") or "",
            problem=data.get("problem") or "",
            solution=data.get("solution") or "",
            expected_result=data.get("expected_result"),
            prerequisites=data.get("prerequisites"),
            additional_notes=data.get("additional_notes"),
            tags=[str(t) for t in data.get("tags") or []],
            content_markdown=data.get("content_markdown") or "",
            template_id=data.get("template_id"),
            ticket_key=data.get("ticket_key"),
        )


@dataclass
class ParsedArticle:
    title: str = UNTITLED
    problem: str = ""
    solution: str = ""
    expected_result: str = ""
    prerequisites: str = ""
    additional_notes: str = ""
    tags: List[str] = field(default_factory=list)

    def to_article(self, template_id: Optional[str] = None,
                   ticket_key: Optional[str] = None) -> Article:
        # local import: codec depends on this module
        from ..codec.markdown import serialize

        article = Article(
            title=self.title,
            problem=self.problem,
            solution=self.solution,
            expected_result=self.expected_result or None,
            prerequisites=self.prerequisites or None,
            additional_notes=self.additional_notes or None,
            tags=list(self.tags),
            template_id=template_id,
            ticket_key=ticket_key,
        )
        article.content_markdown = serialize(article)
        return article


@dataclass
class QualityScore:
    overall: int = 0
    has_title: bool = False
    has_problem: bool = False
    has_solution: bool = False
    has_expected_result: bool = False
    has_prerequisites: bool = False
    solution_step_count: int = 0
    word_count: int = 0
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QualityScore":
        overall = int(data.get("overall") or 0)
        return cls(
            overall=max(0, min(overall, 100)),
            has_title=bool(data.get("has_title")),
            has_problem=bool(data.get("has_problem")),
            has_solution=bool(data.get("has_solution")),
            has_expected_result=bool(data.get("has_expected_result")),
            has_prerequisites=bool(data.get("has_prerequisites")),
            solution_step_count=int(data.get("solution_step_count") or 0),
            word_count=int(data.get("word_count") or 0),
            warnings=[str(w) for w in data.get("warnings") or []],
        )


@dataclass
class FlaggedSection:
    line_number: int
    pattern_type: str
    matched_text: str
    severity: str
    start_col: Optional[int] = None
    end_col: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FlaggedSection":
        return cls(
            line_number=int(data.get("line_number", 0)),
            pattern_type=str(data.get("pattern_type", "")),
            matched_text=str(data.get("matched_text", "")),
            severity=str(data.get("severity", "medium")),
            start_col=data.get("start_col"),
            end_col=data.get("end_col"),
        )


@dataclass
class JiraTicket:
    key: str
    summary: str
    description: Optional[str] = None
    labels: List[str] = field(default_factory=list)
    comments: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JiraTicket":
        return cls(
            key=str(data.get("key", "")),
            summary=str(data.get("summary", "")),
            description=data.get("description") if isinstance(data.get("description"), str) else None,
            labels=[str(l) for l in data.get("labels") or []],
            comments=list(data.get("comments") or []),
        )
