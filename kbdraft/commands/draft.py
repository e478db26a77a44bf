# kbdraft/commands/draft.py
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
from prompt_toolkit.application import Application
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.key_binding.bindings.focus import focus_next, focus_previous
from prompt_toolkit.layout import HSplit, Layout, VSplit, Window
from prompt_toolkit.layout.containers import DynamicContainer
from prompt_toolkit.layout.controls import FormattedTextControl
from prompt_toolkit.layout.dimension import Dimension as D
from prompt_toolkit.styles import DynamicStyle
from prompt_toolkit.widgets import Frame, TextArea

from ..codec.markdown import parse, serialize
from ..codec.ticket import load_ticket, ticket_to_markdown
from ..editor.surface import EditorConfig
from ..editor.sync import EditorSyncController
from ..editor.textarea import TextAreaSurface
from ..form.assembler import FormAssembler, validate_article
from ..models.article import Article, QualityScore
from ..models.template import Template
from ..templates.builtin import list_templates
from ..service.client import KnowledgeServiceClient, client_from_config
from ..utils.config import debounce_seconds, resolve_theme
from ..utils.log import info, success, warn, warner
from .templates_cmd import template_option

# (field, label, height)
FIELDS = [
    ("title", "Title *", 1),
    ("problem", "Problem *", 4),
    ("solution", "Solution steps *", 8),
    ("expected_result", "Expected Result", 3),
    ("prerequisites", "Prerequisites", 3),
    ("additional_notes", "Additional Notes", 3),
    ("tags", "Tags (comma-separated)", 1),
]

HELP = "tab/shift-tab move • ctrl-s save • ctrl-t theme • f2 template • ctrl-q quit"


class DraftSession:
    """
    Form fields on the left, free Markdown on the right.

    Field edits recompose the Markdown through the FormAssembler and reach the
    editor through the EditorSyncController; typing in the editor updates
    ``markdown``, which is what gets saved.
    """

    def __init__(self, article: Article, markdown: str, *, output: Path,
                 client: Optional[KnowledgeServiceClient] = None,
                 theme: str = "light", debounce: float = 0.5, scheduler=None):
        self.output = Path(output)
        self.client = client
        self.markdown = markdown
        self.score: Optional[QualityScore] = None
        self.message = HELP
        self.saved = False
        self._confirm_flags = False

        self.controller = EditorSyncController(
            TextAreaSurface,
            value=markdown,
            config=EditorConfig(theme=theme),
            on_change=self._on_editor_change,
        )
        self.assembler = FormAssembler(
            article,
            publish=self.controller.set_value,
            scorer=self._score if client else None,
            scheduler=scheduler,
            debounce=debounce,
            on_score=self._on_score,
            on_error=self._on_score_error,
        )

        self.fields: Dict[str, TextArea] = {}
        for name, _label, height in FIELDS:
            if name == "tags":
                text = ", ".join(article.tags)
            else:
                text = getattr(article, name) or ""
            area = TextArea(text=text, multiline=height > 1, height=height, style="class:editor")
            area.buffer.on_text_changed += self._field_handler(name)
            self.fields[name] = area

        self.app: Optional[Application] = None

    # ---------------- wiring ----------------
    def _field_handler(self, name: str):
        def handler(buffer):
            self._confirm_flags = False
            if name == "tags":
                self.assembler.set_tags_text(buffer.text)
            else:
                self.assembler.update_field(name, buffer.text)
        return handler

    def _on_editor_change(self, text: str) -> None:
        self._confirm_flags = False
        self.markdown = text

    def _score(self, payload: Dict[str, Any]):
        return asyncio.to_thread(self.client.score_quality, payload)

    def _on_score(self, score: QualityScore) -> None:
        self.score = score
        self._invalidate()

    def _on_score_error(self, error: Exception) -> None:
        self.status(f"Quality scoring failed: {error}")

    def status(self, msg: str) -> None:
        self.message = msg
        self._invalidate()

    def _invalidate(self) -> None:
        if self.app is not None:
            self.app.invalidate()

    def select_template(self, template: Template) -> None:
        self._confirm_flags = False
        self.assembler.select_template(template)
        self.status(f"Template: {template.name}")

    def next_template(self) -> None:
        templates = list_templates()
        ids = [t.id for t in templates]
        current = self.assembler.article.template_id
        index = (ids.index(current) + 1) % len(ids) if current in ids else 0
        self.select_template(templates[index])

    def toggle_theme(self) -> None:
        editor_focused = bool(self.app and self.app.layout.has_focus(self.controller.surface.text_area))
        theme = "dark" if self.controller.config.theme == "light" else "light"
        self.controller.set_theme(theme)
        if editor_focused:
            self.app.layout.focus(self.controller.surface.text_area)
        self.status(f"Theme: {theme}")

    # ---------------- save ----------------
    async def save(self) -> bool:
        """Validate, scan, write. Returns True when the file was written."""
        warnings: List[str] = []
        parsed = parse(self.markdown, on_warning=warnings.append)
        errors = validate_article(parsed)
        if errors:
            self.status("Cannot save: " + "; ".join(errors))
            return False

        if self.client is not None and not self._confirm_flags:
            try:
                flags = await asyncio.to_thread(self.client.scan_sensitive_data, self.markdown)
            except Exception as e:  # the scan never blocks a save
                flags = []
                warnings.append(f"sensitive data scan unavailable: {e}")
            if flags:
                self._confirm_flags = True
                first = flags[0]
                self.status(f"{len(flags)} potential sensitive data issue(s), first on line "
                            f"{first.line_number} ({first.pattern_type}). ctrl-s again to save anyway.")
                return False

        self.output.parent.mkdir(parents=True, exist_ok=True)
        self.output.write_text(self.markdown.rstrip("\n") + "\n", encoding="utf-8")
        self.saved = True
        self._confirm_flags = False
        note = f" ({'; '.join(warnings)})" if warnings else ""
        self.status(f"Saved {self.output}{note}")
        return True

    # ---------------- UI ----------------
    def _status_text(self):
        parts = []
        if self.score is not None:
            parts.append(("class:status.score", f" {self.score.overall}% "))
            parts.append(("class:status", " "))
        parts.append(("class:status", self.message))
        return parts

    def build_app(self) -> Application:
        form = HSplit([Frame(self.fields[name], title=label) for name, label, _h in FIELDS])
        editor = Frame(DynamicContainer(lambda: self.controller.surface.text_area), title="Markdown")
        body = VSplit([
            HSplit([form], width=D(weight=1)),
            HSplit([editor], width=D(weight=2)),
        ])
        status_window = Window(FormattedTextControl(self._status_text), height=1, style="class:status")
        root = HSplit([body, status_window])

        kb = KeyBindings()
        kb.add("tab")(focus_next)
        kb.add("s-tab")(focus_previous)

        @kb.add("c-q")
        def _(event):
            event.app.exit(result=self.saved)

        @kb.add("c-t")
        def _(event):
            self.toggle_theme()

        @kb.add("f2")
        def _(event):
            self.next_template()

        @kb.add("c-s")
        def _(event):
            event.app.create_background_task(self.save())

        app = Application(
            layout=Layout(root, focused_element=self.fields["title"]),
            key_bindings=kb,
            style=DynamicStyle(lambda: self.controller.surface.style),
            full_screen=True,
            mouse_support=True,
        )
        self.app = app
        return app

    def run(self) -> bool:
        try:
            return bool(self.build_app().run())
        finally:
            self.controller.teardown()


@click.command(name="draft")
@click.option('--output', '-o', type=click.Path(dir_okay=False), required=True,
              help='Markdown file the draft is saved to')
@click.option('--from-ticket', type=click.Path(exists=True, dir_okay=False), default=None,
              help='Seed from an exported Jira ticket (JSON)')
@click.option('--from-markdown', type=click.Path(exists=True, dir_okay=False), default=None,
              help='Seed from an existing article Markdown file')
@template_option
@click.option('--theme', type=click.Choice(["light", "dark"]), default=None)
@click.option('--score/--no-score', default=True, show_default=True,
              help='Live quality scoring through the knowledge service')
@click.option('--service-url', envvar='KB_SERVICE_URL', help='Knowledge service base URL')
@click.option('--token', envvar='KB_SERVICE_TOKEN', help='Knowledge service token')
@click.pass_context
def draft(ctx, output, from_ticket, from_markdown, template, theme, score, service_url, token):
    """Interactive article form with a synced Markdown editor."""
    cfg = ctx.obj.get("config", {})
    if from_ticket and from_markdown:
        raise click.UsageError("Use either --from-ticket or --from-markdown, not both")

    article = Article()
    markdown = None
    on_warning = warner(ctx)
    if from_ticket:
        ticket = load_ticket(from_ticket)
        markdown = ticket_to_markdown(ticket)
        article = parse(markdown, on_warning=on_warning).to_article(ticket_key=ticket.key or None)
    elif from_markdown:
        markdown = Path(from_markdown).read_text(encoding='utf-8')
        article = parse(markdown, on_warning=on_warning).to_article()
    if template is not None:
        article.template_id = template.id
        if markdown is None:
            markdown = template.output_structure
    if markdown is None:
        markdown = serialize(article)

    client = None
    if score:
        if service_url or cfg.get("service_url"):
            client = client_from_config(cfg, service_url, token, verbose=ctx.obj.get("verbose", False))
        else:
            warn(ctx, "No service_url configured; live quality scoring is off.")

    session = DraftSession(
        article,
        markdown,
        output=Path(output),
        client=client,
        theme=resolve_theme(theme, cfg),
        debounce=debounce_seconds(cfg),
    )
    if session.run():
        success(ctx, f"Draft saved to {output}")
    else:
        info(ctx, "Exited without saving.")
