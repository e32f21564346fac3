"""Info command for bear-backup CLI."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import click

from ..config import BearBackupConfig
from ..utils.datetime_fmt import to_user_friendly_utc
from ._common import get_app


@click.command(name="info")
@click.pass_context
def info(ctx: click.Context) -> None:
    """Display the effective configuration and source locations."""

    app = get_app(ctx)
    config: BearBackupConfig = app.config

    click.echo("bear-backup info:\n")
    click.echo(f"  Config file   : {config.source_path or '(defaults)'}")
    click.echo(f"  Database      : {_describe(config.database_path)}")
    if config.local_files_path is None:
        click.echo("  Attachments   : disabled")
    else:
        click.echo(f"  Attachments   : {_describe(config.local_files_path)}")
    layout = "one directory per tag" if config.use_tags_as_directories else "flat"
    click.echo(f"  Layout        : {layout}")
    concurrency = config.max_concurrency or "unbounded"
    click.echo(f"  Concurrency   : {concurrency}")


def _describe(path: Path) -> str:
    if not path.exists():
        return f"{path} (missing)"
    modified = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    return f"{path} (modified {to_user_friendly_utc(modified)})"


def register(cli: click.Group) -> None:
    """Register the command with the root CLI group."""

    cli.add_command(info)
