from __future__ import annotations

import asyncio
import inspect
from dataclasses import replace
from typing import Any, Callable, List, Optional, Protocol

from ..codec.markdown import serialize, split_tags
from ..models.article import Article, QualityScore
from ..models.template import Template

CONTENT_FIELDS = (
    "title",
    "problem",
    "solution",
    "expected_result",
    "prerequisites",
    "additional_notes",
)
SCORED_FIELDS = CONTENT_FIELDS + ("tags",)

DEFAULT_DEBOUNCE = 0.5


class TimerHandle(Protocol):
    def cancel(self) -> Any: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle: ...


class _RunningLoop:
    """Resolves the running asyncio loop lazily, at scheduling time."""

    def call_later(self, delay, callback):
        return asyncio.get_running_loop().call_later(delay, callback)


Scorer = Callable[[dict], Any]  # returns QualityScore or an awaitable of one


def validate_article(article) -> List[str]:
    """Save-boundary check: title, problem and solution must not be blank."""
    errors = []
    if not article.title.strip():
        errors.append("Title is required")
    if not article.problem.strip():
        errors.append("Problem is required")
    if not article.solution.strip():
        errors.append("Solution is required")
    return errors


class FormAssembler:
    """
    Owns the structured article fields.

    Every content-field change recomposes the Markdown and hands it to
    ``publish``. Field changes also (re)arm a single debounce timer; when it
    fires, one scoring request goes out. Only the response to the latest
    request is applied; a failing scorer leaves the previous score in place.
    """

    def __init__(self, article: Optional[Article] = None, *,
                 publish: Optional[Callable[[str], None]] = None,
                 scorer: Optional[Scorer] = None,
                 scheduler: Optional[Scheduler] = None,
                 debounce: float = DEFAULT_DEBOUNCE,
                 on_score: Optional[Callable[[QualityScore], None]] = None,
                 on_error: Optional[Callable[[Exception], None]] = None):
        self.article = replace(article, tags=list(article.tags)) if article else Article()
        self.article.content_markdown = serialize(self.article)
        self._publish = publish
        self._scorer = scorer
        self._scheduler = scheduler or _RunningLoop()
        self.debounce = debounce
        self._on_score = on_score
        self._on_error = on_error

        self.score: Optional[QualityScore] = None
        self.request_seq = 0
        self.requests_issued = 0
        self._pending: Optional[TimerHandle] = None
        self._in_flight: Optional[asyncio.Future] = None

    # ---------------- fields ----------------
    @property
    def markdown(self) -> str:
        return self.article.content_markdown

    def update_field(self, name: str, value) -> None:
        if name not in SCORED_FIELDS:
            raise KeyError(f"Unknown article field: {name}")
        if name == "tags":
            value = list(value)
        if getattr(self.article, name) == value:
            return
        setattr(self.article, name, value)
        if name in CONTENT_FIELDS:
            self._recompose()
        self._schedule_score()

    def set_tags_text(self, text: str) -> None:
        self.update_field("tags", split_tags(text))

    def load(self, article: Article) -> None:
        """Replace every field at once (ticket import, draft load)."""
        self.article = replace(article, tags=list(article.tags))
        self._recompose()
        self._schedule_score()

    def select_template(self, template: Template) -> None:
        """
        Record the chosen template and publish its skeleton as the editor's
        new content. Fields are left alone; the next field edit recomposes
        from them as usual.
        """
        self.article.template_id = template.id
        self.article.content_markdown = template.output_structure
        if self._publish is not None:
            self._publish(template.output_structure)

    def _recompose(self) -> str:
        markdown = serialize(self.article)
        self.article.content_markdown = markdown
        if self._publish is not None:
            self._publish(markdown)
        return markdown

    def validate(self) -> List[str]:
        return validate_article(self.article)

    # ---------------- scoring ----------------
    def _schedule_score(self) -> None:
        if self._scorer is None:
            return
        if self._pending is not None:
            self._pending.cancel()
        self._pending = self._scheduler.call_later(self.debounce, self._fire_score)

    def flush(self) -> None:
        """Fire a pending scoring request now instead of waiting for quiescence."""
        if self._pending is not None:
            self._pending.cancel()
            self._fire_score()

    def _fire_score(self) -> None:
        self._pending = None
        self.request_seq += 1
        self.requests_issued += 1
        seq = self.request_seq
        try:
            result = self._scorer(self.article.to_payload())
        except Exception as e:
            self._report(e)
            return

        if not inspect.isawaitable(result):
            self._apply(seq, result)
            return

        if self._in_flight is not None and not self._in_flight.done():
            self._in_flight.cancel()
        future = asyncio.ensure_future(result)
        future.add_done_callback(lambda f: self._finish(seq, f))
        self._in_flight = future

    def _finish(self, seq: int, future: asyncio.Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            if seq == self.request_seq:
                self._report(error)
            return
        self._apply(seq, future.result())

    def _apply(self, seq: int, score: QualityScore) -> None:
        if seq != self.request_seq:
            return
        self.score = score
        if self._on_score is not None:
            self._on_score(score)

    def _report(self, error: Exception) -> None:
        if self._on_error is not None:
            self._on_error(error)
