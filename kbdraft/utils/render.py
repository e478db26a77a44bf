# kbdraft/utils/render.py
from __future__ import annotations

from typing import List, Optional

from rich.console import Console
from rich.markdown import Markdown
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from ..models.article import FlaggedSection, ParsedArticle, QualityScore
from ..models.template import Template

CODE_THEMES = {"light": "default", "dark": "monokai"}


def render_markdown_paged(markdown_text: str, title: Optional[str] = None,
                          theme: str = "light", pager: bool = True) -> None:
    """
    Show the article in the terminal, optionally through Rich's pager.
    """
    console = Console()

    def _print():
        if title:
            console.print(Panel.fit(f"[bold]{title}[/bold]"))
        console.print(Markdown(markdown_text, code_theme=CODE_THEMES.get(theme, "default")))

    if pager:
        with console.pager(styles=True):
            _print()
    else:
        _print()


def score_color(overall: int) -> str:
    if overall >= 80:
        return "green"
    if overall >= 60:
        return "yellow"
    return "red"


def _mark(flag: bool) -> str:
    return "[green]✓[/green]" if flag else "[red]✗[/red]"


def quality_table(score: QualityScore) -> Table:
    table = Table(title=f"Quality [bold {score_color(score.overall)}]{score.overall}%[/]", show_header=False)
    table.add_column("check")
    table.add_column("value", justify="right")
    table.add_row("Title", _mark(score.has_title))
    table.add_row("Problem", _mark(score.has_problem))
    table.add_row("Solution", _mark(score.has_solution))
    table.add_row("Expected Result", _mark(score.has_expected_result))
    table.add_row("Prerequisites", _mark(score.has_prerequisites))
    table.add_row("Solution Steps", str(score.solution_step_count))
    table.add_row("Word Count", str(score.word_count))
    for w in score.warnings:
        table.add_row("[yellow]⚠ warning[/yellow]", escape(w))
    return table


def flags_table(flags: List[FlaggedSection]) -> Table:
    table = Table(title=f"{len(flags)} potential sensitive data issue(s)")
    table.add_column("Line", justify="right")
    table.add_column("Type")
    table.add_column("Severity")
    table.add_column("Match")
    for f in flags:
        color = "red" if f.severity == "high" else "yellow"
        table.add_row(str(f.line_number), escape(f.pattern_type), f"[{color}]{escape(f.severity)}[/{color}]", escape(f.matched_text))
    return table


def article_table(parsed: ParsedArticle) -> Table:
    table = Table(title=escape(parsed.title), show_lines=True)
    table.add_column("Field", style="bold")
    table.add_column("Content")
    table.add_row("Problem", escape(parsed.problem) or "[dim](empty)[/dim]")
    table.add_row("Solution", escape(parsed.solution) or "[dim](empty)[/dim]")
    table.add_row("Expected Result", escape(parsed.expected_result) or "[dim](empty)[/dim]")
    table.add_row("Prerequisites", escape(parsed.prerequisites) or "[dim](empty)[/dim]")
    table.add_row("Additional Notes", escape(parsed.additional_notes) or "[dim](empty)[/dim]")
    table.add_row("Tags", escape(", ".join(parsed.tags)) or "[dim](none)[/dim]")
    return table


def templates_table(templates: List[Template]) -> Table:
    table = Table(title="Article templates")
    table.add_column("Slug", style="bold")
    table.add_column("Name")
    table.add_column("Description")
    for t in templates:
        name = escape(t.name) + (" [dim](built-in)[/dim]" if t.is_builtin else "")
        table.add_row(escape(t.slug), name, escape(t.description))
    return table

def print_renderable(renderable) -> None:
    Console().print(renderable)
