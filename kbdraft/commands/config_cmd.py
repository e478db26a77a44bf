from __future__ import annotations

import json

import click

from ..utils.config import get_default_config_path, load_config, save_config
from ..utils.log import success

_SECRET_KEYS = ("token",)
_INT_KEYS = ("debounce_ms", "timeout", "retries")


@click.group(name="config")
def config_group():
    """Inspect and update configuration profiles."""
    pass


@config_group.command(name="show")
@click.pass_context
def show_config(ctx):
    """Print the active profile (secrets redacted)."""
    cfg = load_config(ctx.obj.get("config_path"), ctx.obj.get("profile", "default"))
    redacted = {k: ("***" if k in _SECRET_KEYS and v else v) for k, v in cfg.items()}
    click.secho(f"Profile: {ctx.obj.get('profile')}", fg="cyan")
    click.secho(f"Path   : {ctx.obj.get('config_path') or get_default_config_path()}", fg="cyan")
    click.echo(json.dumps(redacted, indent=2, ensure_ascii=False))


@config_group.command(name="set")
@click.argument('key', type=click.Choice(["service_url", "token", "theme", "debounce_ms", "timeout", "retries"]))
@click.argument('value')
@click.pass_context
def set_config(ctx, key, value):
    """Set KEY to VALUE in the active profile."""
    if key == "theme" and value not in ("light", "dark"):
        raise click.BadParameter("theme must be 'light' or 'dark'", param_hint="VALUE")
    parsed = value
    if key in _INT_KEYS:
        try:
            parsed = int(value)
        except ValueError:
            raise click.BadParameter(f"{key} must be an integer", param_hint="VALUE")

    path = ctx.obj.get("config_path") or get_default_config_path()
    save_config(path, ctx.obj.get("profile", "default"), {key: parsed})
    success(ctx, f"Set {key} in profile '{ctx.obj.get('profile')}' ({path})")
