"""bear-backup CLI package."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import click

from . import backup_cmd, config_cmd, info
from ._common import CONTEXT_SETTINGS, BearBackupCliError

__all__ = ["cli", "main", "BearBackupCliError"]

_LOG_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "-c",
    "--config",
    "config_path_opt",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to configuration TOML file.",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase logging output (repeat for debug output).",
)
@click.pass_context
def cli(ctx: click.Context, config_path_opt: Path | None, verbose: int) -> None:
    """Back up Bear notes as Markdown files."""

    ctx.ensure_object(dict)
    invoked = ctx.invoked_subcommand

    if invoked is None:
        click.echo(ctx.command.get_help(ctx))
        ctx.exit(0)

    logging.basicConfig(
        level=_LOG_LEVELS[min(verbose, len(_LOG_LEVELS) - 1)],
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj["config_path"] = config_path_opt


for register_command in (
    backup_cmd.register,
    config_cmd.register,
    info.register,
):
    register_command(cli)


def main(argv: Sequence[str] | None = None) -> int:
    args = list(argv) if argv is not None else None
    try:
        return cli.main(args=args, prog_name="bear-backup", standalone_mode=False) or 0
    except click.ClickException as exc:
        click.echo(str(exc), err=True)
        return 1
    except SystemExit as exc:
        return int(exc.code or 0)
