from pathlib import Path

import click

from ..codec.markdown import parse, serialize
from ..editor.external import ExternalEditorSurface
from ..editor.surface import EditorConfig
from ..editor.sync import EditorSyncController
from ..form.assembler import validate_article
from ..models.article import Article
from ..utils.config import resolve_theme
from ..utils.log import info, success, warn, warner


@click.command(name="edit")
@click.argument('markdown_file', type=click.Path(dir_okay=False))
@click.option('--editor', default=None, help='Editor command (default: $VISUAL / $EDITOR)')
@click.option('--theme', type=click.Choice(["light", "dark"]), default=None)
@click.pass_context
def edit(ctx, markdown_file, editor, theme):
    """Free-edit an article in $EDITOR and save it back (new files start from a skeleton)."""
    cfg = ctx.obj.get("config", {})
    path = Path(markdown_file)
    original = path.read_text(encoding='utf-8') if path.exists() else serialize(Article())

    state = {"markdown": original}

    def on_change(value: str):
        state["markdown"] = value

    controller = EditorSyncController(
        lambda config, seed: ExternalEditorSurface(config, seed, editor=editor),
        value=original,
        config=EditorConfig(theme=resolve_theme(theme, cfg)),
        on_change=on_change,
    )
    try:
        changed = controller.surface.open()
    finally:
        controller.teardown()

    if not changed:
        info(ctx, "No changes.")
        return

    markdown = state["markdown"]
    parsed = parse(markdown, on_warning=warner(ctx))
    for msg in validate_article(parsed):
        warn(ctx, f"Incomplete article: {msg}")

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(markdown.rstrip("\n") + "\n", encoding='utf-8')
    success(ctx, f"Saved {path} ({parsed.title})")
