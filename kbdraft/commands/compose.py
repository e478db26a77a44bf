import json
from dataclasses import asdict
from pathlib import Path

import click

from ..codec.markdown import parse, split_tags
from ..form.assembler import FormAssembler
from ..models.article import Article
from ..utils.log import success, warn, warner
from ..utils.render import article_table, print_renderable
from .templates_cmd import template_option


@click.command(name="compose")
@click.option('--title', default=None, help='Article title (H1)')
@click.option('--problem', default=None, help='Problem description')
@click.option('--solution', default=None, help='Solution steps')
@click.option('--expected-result', default=None, help='What the user should see afterwards')
@click.option('--prerequisites', default=None, help='Requirements before starting')
@click.option('--additional-notes', default=None, help='Workarounds, related issues, prevention tips')
@click.option('--tags', default=None, help='Comma-separated tags (not written to the Markdown)')
@click.option('--from-json', 'from_json', type=click.Path(exists=True, dir_okay=False),
              help='Start from an article JSON file; explicit options override its fields')
@template_option
@click.option('--output', '-o', type=click.Path(dir_okay=False), default=None,
              help='Write Markdown here instead of stdout')
@click.pass_context
def compose(ctx, title, problem, solution, expected_result, prerequisites,
            additional_notes, tags, from_json, output, template):
    """Compose article Markdown from structured fields."""
    if from_json and template:
        raise click.UsageError("Use either --from-json or --template, not both")

    article = Article()
    if from_json:
        article = Article.from_dict(json.loads(Path(from_json).read_text(encoding='utf-8')))
    elif template:
        # the skeleton's placeholder text fills whatever the options leave unset
        article = parse(template.output_structure).to_article(template_id=template.id)

    assembler = FormAssembler(article)
    overrides = {
        "title": title,
        "problem": problem,
        "solution": solution,
        "expected_result": expected_result,
        "prerequisites": prerequisites,
        "additional_notes": additional_notes,
    }
    for name, value in overrides.items():
        if value is not None:
            assembler.update_field(name, value)
    if tags is not None:
        assembler.update_field("tags", split_tags(tags))

    for problem_msg in assembler.validate():
        warn(ctx, f"Incomplete article: {problem_msg}")

    if ctx.obj.get("json"):
        click.echo(json.dumps(assembler.article.to_payload(), indent=2, ensure_ascii=False))
        return

    if output:
        out = Path(output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(assembler.markdown + "\n", encoding='utf-8')
        success(ctx, f"Wrote {output}")
    else:
        click.echo(assembler.markdown)


@click.command(name="parse")
@click.argument('markdown_file', type=click.File('r', encoding='utf-8'))
@click.pass_context
def parse_markdown(ctx, markdown_file):
    """Recover structured fields from an article Markdown file ('-' for stdin)."""
    parsed = parse(markdown_file.read(), on_warning=warner(ctx))

    if ctx.obj.get("json"):
        click.echo(json.dumps(asdict(parsed), indent=2, ensure_ascii=False))
        return
    print_renderable(article_table(parsed))
