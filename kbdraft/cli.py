# kbdraft/cli.py
from __future__ import annotations

import click

from .utils.config import load_config
from .commands.compose import compose, parse_markdown
from .commands.ticket import import_ticket
from .commands.edit import edit
from .commands.draft import draft
from .commands.check import score, scan
from .commands.preview import preview
from .commands.config_cmd import config_group
from .commands.templates_cmd import templates


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=str),
    help="Path to config TOML (default: ~/.config/kb-draft/config.toml)",
)
@click.option(
    "--profile",
    default="default",
    show_default=True,
    help="Config profile name in the TOML file",
)
@click.option(
    "--verbose/--no-verbose",
    default=False,
    show_default=True,
    help="Verbose logging",
)
@click.option(
    "--quiet/--no-quiet",
    default=False,
    show_default=True,
    help="Suppress non-error output",
)
@click.option(
    "--json/--no-json",
    "json_mode",
    default=False,
    show_default=True,
    help="Output in JSON where supported",
)
@click.version_option(package_name="kb-draft", prog_name="kb-draft")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, profile: str,
        verbose: bool, quiet: bool, json_mode: bool):
    """
    kb-draft: turn support tickets into knowledge-base articles.
    """
    cfg = load_config(config_path, profile)

    # shared context for subcommands
    ctx.ensure_object(dict)
    ctx.obj.update(
        {
            "config": cfg,
            "verbose": verbose,
            "quiet": quiet,
            "json": json_mode,
            "profile": profile,
            "config_path": config_path,
        }
    )


# ---- Subcommands ----
cli.add_command(compose)          # kb-draft compose ...
cli.add_command(parse_markdown)   # kb-draft parse ...
cli.add_command(import_ticket)    # kb-draft import-ticket ...
cli.add_command(edit)             # kb-draft edit ...
cli.add_command(draft)            # kb-draft draft ...
cli.add_command(score)            # kb-draft score ...
cli.add_command(scan)             # kb-draft scan ...
cli.add_command(preview)          # kb-draft preview ...
cli.add_command(templates)        # kb-draft templates ...
cli.add_command(config_group)     # kb-draft config ...


if __name__ == "__main__":
    cli()
