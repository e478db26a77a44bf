import asyncio

import pytest

from kbdraft.editor.surface import BufferSurface
from kbdraft.editor.sync import EditorSyncController
from kbdraft.form.assembler import FormAssembler, validate_article
from kbdraft.models.article import Article, QualityScore
from kbdraft.templates.builtin import get_template


class FakeTimer:
    def __init__(self, when, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeScheduler:
    """Millisecond clock driven by the test."""

    def __init__(self):
        self.now = 0
        self.timers = []

    def call_later(self, delay, callback):
        timer = FakeTimer(self.now + round(delay * 1000), callback)
        self.timers.append(timer)
        return timer

    def advance(self, ms):
        self.now += ms
        for timer in list(self.timers):
            if not timer.cancelled and not timer.fired and timer.when <= self.now:
                timer.fired = True
                timer.callback()

    @property
    def active(self):
        return [t for t in self.timers if not t.cancelled and not t.fired]


class RecordingScorer:
    def __init__(self, overall=70):
        self.calls = []
        self.overall = overall

    def __call__(self, payload):
        self.calls.append(payload)
        return QualityScore(overall=self.overall)


def test_field_change_publishes_serialized_markdown():
    published = []
    assembler = FormAssembler(publish=published.append)
    assembler.update_field("title", "Reset MFA")
    assembler.update_field("problem", "User lost their phone")

    assert published[-1] == "# Reset MFA\n\n## Problem\nUser lost their phone\n\n## Solution"
    assert assembler.article.content_markdown == published[-1]
    assert assembler.markdown == published[-1]


def test_unchanged_value_does_not_republish():
    published = []
    assembler = FormAssembler(Article(title="T"), publish=published.append)
    assembler.update_field("title", "T")
    assert published == []


def test_tags_do_not_recompose():
    published = []
    assembler = FormAssembler(publish=published.append)
    assembler.set_tags_text("vpn, network,, ")
    assert assembler.article.tags == ["vpn", "network"]
    assert published == []


def test_unknown_field_rejected():
    with pytest.raises(KeyError):
        FormAssembler().update_field("ticket_key", "SUP-1")


def test_assembler_drives_editor_sync():
    surfaces = []

    def factory(config, seed):
        surfaces.append(BufferSurface(config, seed))
        return surfaces[-1]

    owner = {}
    controller = EditorSyncController(factory, "", on_change=lambda v: owner.update(markdown=v))
    assembler = FormAssembler(publish=controller.set_value)

    assembler.update_field("title", "T")
    assert surfaces[0].text == "# T\n\n## Problem\n\n\n## Solution"
    assert surfaces[0].replace_count == 1

    # user free-edits the Markdown, then a field edit recomposes over it
    surfaces[0].type("\nextra")
    assert "extra" in owner["markdown"]
    assembler.update_field("solution", "Do X")
    assert surfaces[0].text == assembler.markdown
    assert surfaces[0].replace_count == 2


def test_debounce_coalesces_rapid_edits():
    scheduler = FakeScheduler()
    scorer = RecordingScorer()
    assembler = FormAssembler(scorer=scorer, scheduler=scheduler)

    assembler.update_field("title", "A")
    scheduler.advance(200)
    assembler.update_field("title", "AB")
    scheduler.advance(200)
    assembler.update_field("problem", "P")
    assert len(scheduler.active) == 1

    scheduler.advance(499)
    assert scorer.calls == []

    scheduler.advance(1)
    assert len(scorer.calls) == 1
    assert scorer.calls[0]["title"] == "AB"
    assert scorer.calls[0]["problem"] == "P"
    assert assembler.requests_issued == 1
    assert assembler.score.overall == 70

    scheduler.advance(5000)
    assert len(scorer.calls) == 1


def test_tags_change_schedules_scoring():
    scheduler = FakeScheduler()
    scorer = RecordingScorer()
    assembler = FormAssembler(scorer=scorer, scheduler=scheduler)
    assembler.set_tags_text("a, b")
    scheduler.advance(500)
    assert scorer.calls[0]["tags"] == ["a", "b"]


def test_scorer_failure_keeps_previous_score():
    scheduler = FakeScheduler()
    errors = []
    scores = []
    outcomes = [QualityScore(overall=55), RuntimeError("service down")]

    def scorer(payload):
        outcome = outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    assembler = FormAssembler(scorer=scorer, scheduler=scheduler,
                              on_score=scores.append, on_error=errors.append)
    assembler.update_field("title", "one")
    scheduler.advance(500)
    assembler.update_field("title", "two")
    scheduler.advance(500)

    assert [s.overall for s in scores] == [55]
    assert assembler.score.overall == 55
    assert len(errors) == 1 and "service down" in str(errors[0])


def test_stale_async_response_discarded():
    async def scenario():
        loop = asyncio.get_running_loop()
        futures = []

        def scorer(payload):
            fut = loop.create_future()
            futures.append(fut)
            return fut

        applied = []
        assembler = FormAssembler(scorer=scorer, scheduler=FakeScheduler(), on_score=applied.append)
        assembler.update_field("title", "first")
        assembler.flush()
        # first response lands, but a newer request goes out before it is applied
        futures[0].set_result(QualityScore(overall=10))
        assembler.update_field("title", "second")
        assembler.flush()
        await asyncio.sleep(0)
        futures[1].set_result(QualityScore(overall=90))
        await asyncio.sleep(0)
        return assembler, applied

    assembler, applied = asyncio.run(scenario())
    assert [s.overall for s in applied] == [90]
    assert assembler.request_seq == 2


def test_new_request_cancels_in_flight_one():
    async def scenario():
        started = []
        release = asyncio.Event()

        async def scorer(payload):
            started.append(payload["title"])
            await release.wait()
            return QualityScore(overall=len(payload["title"]))

        applied = []
        assembler = FormAssembler(scorer=scorer, scheduler=FakeScheduler(), on_score=applied.append)
        assembler.update_field("title", "one")
        assembler.flush()
        await asyncio.sleep(0)
        first = assembler._in_flight
        assembler.update_field("title", "second")
        assembler.flush()
        await asyncio.sleep(0)
        release.set()
        await asyncio.sleep(0.01)
        return first, applied, started

    first, applied, started = asyncio.run(scenario())
    assert first.cancelled()
    assert started == ["one", "second"]
    assert [s.overall for s in applied] == [6]


def test_async_failure_reported():
    async def scenario():
        async def scorer(payload):
            raise ConnectionError("unreachable")

        errors = []
        assembler = FormAssembler(scorer=scorer, scheduler=FakeScheduler(), on_error=errors.append)
        assembler.update_field("title", "x")
        assembler.flush()
        await asyncio.sleep(0.01)
        return assembler, errors

    assembler, errors = asyncio.run(scenario())
    assert assembler.score is None
    assert isinstance(errors[0], ConnectionError)


def test_load_replaces_fields_and_publishes():
    published = []
    assembler = FormAssembler(publish=published.append)
    assembler.load(Article(title="Loaded", problem="P", solution="S", tags=["t"], ticket_key="SUP-7"))
    assert published == ["# Loaded\n\n## Problem\nP\n\n## Solution\nS"]
    assert assembler.article.ticket_key == "SUP-7"


def test_validate():
    assert validate_article(Article()) == [
        "Title is required", "Problem is required", "Solution is required",
    ]
    assert FormAssembler(Article(title="T", problem="  ", solution="S")).validate() == [
        "Problem is required",
    ]


def test_payload_shape():
    payload = Article(title="T", expected_result="", tags=["a"]).to_payload()
    assert payload["expected_result"] is None
    assert payload["tags"] == ["a"]
    assert set(payload) == {
        "ticket_key", "title", "problem", "solution", "expected_result", "prerequisites",
        "additional_notes", "tags", "content_markdown", "template_id",
    }


def test_select_template_publishes_skeleton_without_scoring():
    published = []
    scheduler = FakeScheduler()
    scorer = RecordingScorer()
    assembler = FormAssembler(publish=published.append, scorer=scorer, scheduler=scheduler)
    template = get_template("troubleshooting")

    assembler.select_template(template)
    assert assembler.article.template_id == template.id
    assert published == [template.output_structure]
    assert assembler.markdown == template.output_structure
    assert assembler.article.to_payload()["template_id"] == template.id
    assert scheduler.active == []

    assembler.update_field("title", "Printer offline")
    assert published[-1].startswith("# Printer offline")
    assert assembler.article.template_id == template.id


def test_template_reaches_editor_through_sync_guard():
    controller = EditorSyncController(BufferSurface, value="")
    assembler = FormAssembler(publish=controller.set_value)
    template = get_template("known-issue")

    assembler.select_template(template)
    assert controller.surface.text == template.output_structure
    assert controller.last_external_value == template.output_structure
