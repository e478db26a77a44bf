import json
from dataclasses import asdict

import click

from ..templates.builtin import get_template, list_templates
from ..utils.render import print_renderable, templates_table


def template_option(f):
    """Shared ``--template`` option; resolves to a Template or None."""
    def _resolve(ctx, param, value):
        if value is None:
            return None
        try:
            return get_template(value)
        except KeyError:
            slugs = ", ".join(t.slug for t in list_templates())
            raise click.BadParameter(f"unknown template '{value}' (choose from: {slugs})")

    return click.option('--template', 'template', default=None, callback=_resolve,
                        help='Start from an article template (slug or id, see `templates`)')(f)


@click.command(name="templates")
@click.argument('key', required=False)
@click.pass_context
def templates(ctx, key):
    """List article templates, or print one template's Markdown skeleton."""
    if key:
        try:
            template = get_template(key)
        except KeyError as e:
            raise click.BadParameter(str(e.args[0]), param_hint="KEY")
        if ctx.obj.get("json"):
            click.echo(json.dumps(asdict(template), indent=2, ensure_ascii=False))
        else:
            click.echo(template.output_structure)
        return

    items = list_templates()
    if ctx.obj.get("json"):
        click.echo(json.dumps([asdict(t) for t in items], indent=2, ensure_ascii=False))
        return
    print_renderable(templates_table(items))
