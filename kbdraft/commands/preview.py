from pathlib import Path

import click

from ..codec.markdown import parse
from ..utils.config import resolve_theme
from ..utils.render import render_markdown_paged


@click.command(name="preview")
@click.argument('markdown_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--theme', type=click.Choice(["light", "dark"]), default=None,
              help='Code block colors (default: theme from config)')
@click.option('--pager/--no-pager', default=True, show_default=True)
@click.pass_context
def preview(ctx, markdown_file, theme, pager):
    """Render article Markdown in the terminal."""
    cfg = ctx.obj.get("config", {})
    text = Path(markdown_file).read_text(encoding='utf-8')
    render_markdown_paged(text, title=parse(text).title, theme=resolve_theme(theme, cfg), pager=pager)
