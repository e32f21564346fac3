"""Backup command for bear-backup CLI."""

from __future__ import annotations

from pathlib import Path

import click

from ..backup import BackupError, run_backup
from ..storage import StorageError
from ._common import BearBackupCliError, get_app


@click.command(name="backup")
@click.argument(
    "output_directory",
    type=click.Path(path_type=Path, file_okay=False),
)
@click.option(
    "--use-tags-as-directories/--flat",
    "use_tags_as_directories",
    default=None,
    help="Write each note into a sub-directory named after its tag.",
)
@click.option(
    "--no-attachments",
    "no_attachments",
    is_flag=True,
    help="Do not copy attached images and files.",
)
@click.option(
    "--database",
    "database_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Path to the Bear database.sqlite file.",
)
@click.option(
    "--local-files",
    "local_files_path",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Path to Bear's 'Local Files' directory holding attachments.",
)
@click.pass_context
def backup(
    ctx: click.Context,
    output_directory: Path,
    use_tags_as_directories: bool | None,
    no_attachments: bool,
    database_path: Path | None,
    local_files_path: Path | None,
) -> None:
    """Export every note into OUTPUT_DIRECTORY."""

    app = get_app(ctx)
    destination = output_directory.expanduser()

    options = app.backup_options(
        use_tags_as_directories=use_tags_as_directories,
        copy_attachments=not no_attachments,
        database_path=database_path.expanduser() if database_path else None,
        local_files_path=local_files_path.expanduser() if local_files_path else None,
    )

    try:
        notes = run_backup(destination, options)
    except (BackupError, StorageError, OSError) as exc:
        raise BearBackupCliError(str(exc)) from exc

    click.echo(f"Backed up {len(notes)} notes to {destination}")


def register(cli: click.Group) -> None:
    """Register the command with the root CLI group."""

    cli.add_command(backup)
