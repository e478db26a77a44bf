import json
from pathlib import Path

import click

from ..codec.ticket import load_ticket, ticket_to_markdown
from ..utils.log import info, success


@click.command(name="import-ticket")
@click.argument('ticket_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', type=click.Path(dir_okay=False), default=None,
              help='Write Markdown here instead of stdout')
@click.pass_context
def import_ticket(ctx, ticket_file, output):
    """Seed article Markdown from an exported Jira ticket (JSON)."""
    ticket = load_ticket(ticket_file)
    markdown = ticket_to_markdown(ticket)

    if ctx.obj.get("json"):
        click.echo(json.dumps({"ticket_key": ticket.key, "content_markdown": markdown},
                              indent=2, ensure_ascii=False))
        return

    if output:
        out = Path(output)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(markdown + "\n", encoding='utf-8')
        info(ctx, f"Imported {ticket.key or ticket_file}")
        success(ctx, f"Wrote {output}")
    else:
        click.echo(markdown)
