import json
from dataclasses import asdict

import click
import requests

from ..codec.markdown import parse
from ..service.client import client_from_config
from ..service.errors import ServiceError
from ..utils.log import error, success, warner
from ..utils.render import flags_table, print_renderable, quality_table


@click.command(name="score")
@click.argument('markdown_file', type=click.File('r', encoding='utf-8'))
@click.option('--service-url', envvar='KB_SERVICE_URL', help='Knowledge service base URL')
@click.option('--token', envvar='KB_SERVICE_TOKEN', help='Knowledge service token')
@click.pass_context
def score(ctx, markdown_file, service_url, token):
    """Ask the knowledge service for a quality score of an article."""
    cfg = ctx.obj.get("config", {})
    client = client_from_config(cfg, service_url, token, verbose=ctx.obj.get("verbose", False))

    parsed = parse(markdown_file.read(), on_warning=warner(ctx))
    article = parsed.to_article()
    try:
        result = client.score_quality(article.to_payload())
    except (ServiceError, requests.RequestException) as e:
        error(ctx, f"Quality scoring failed: {e}")
        raise SystemExit(1)

    if ctx.obj.get("json"):
        click.echo(json.dumps(asdict(result), indent=2))
        return
    print_renderable(quality_table(result))


@click.command(name="scan")
@click.argument('markdown_file', type=click.File('r', encoding='utf-8'))
@click.option('--allow/--no-allow', default=False, show_default=True,
              help='Exit 0 even when sensitive data is flagged')
@click.option('--service-url', envvar='KB_SERVICE_URL', help='Knowledge service base URL')
@click.option('--token', envvar='KB_SERVICE_TOKEN', help='Knowledge service token')
@click.pass_context
def scan(ctx, markdown_file, allow, service_url, token):
    """Pre-publish gate: scan article Markdown for secrets and internal data."""
    cfg = ctx.obj.get("config", {})
    client = client_from_config(cfg, service_url, token, verbose=ctx.obj.get("verbose", False))

    try:
        flags = client.scan_sensitive_data(markdown_file.read())
    except (ServiceError, requests.RequestException) as e:
        error(ctx, f"Sensitive data scan failed: {e}")
        raise SystemExit(1)

    if ctx.obj.get("json"):
        click.echo(json.dumps([asdict(f) for f in flags], indent=2))
    elif not flags:
        success(ctx, "No sensitive data found.")
    else:
        print_renderable(flags_table(flags))

    if flags and not allow:
        raise SystemExit(2)
