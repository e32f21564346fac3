"""Application bootstrap and context container for bear-backup."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .backup import BackupOptions
from .config import BearBackupConfig, load_config
from .filesystem import LocalFileSystem
from .storage import BearDatabaseDriver


@dataclass(slots=True)
class AppContext:
    """Aggregates configuration and the concrete adapters for a CLI run."""

    config: BearBackupConfig
    driver: BearDatabaseDriver
    filesystem: LocalFileSystem

    def backup_options(
        self,
        *,
        use_tags_as_directories: bool | None = None,
        copy_attachments: bool = True,
        database_path: Path | None = None,
        local_files_path: Path | None = None,
    ) -> BackupOptions:
        """Wire the adapters into options, letting CLI flags win over config."""

        config = self.config
        if use_tags_as_directories is None:
            use_tags_as_directories = config.use_tags_as_directories

        files_path = local_files_path or config.local_files_path
        if not copy_attachments:
            files_path = None

        return BackupOptions(
            driver=self.driver,
            make_dir=self.filesystem.ensure_dir,
            filesystem=self.filesystem,
            database_path=database_path or config.database_path,
            local_files_path=files_path,
            use_tags_as_directories=use_tags_as_directories,
            max_concurrency=config.max_concurrency,
        )


def bootstrap(config_path: Path | None) -> AppContext:
    """Load configuration and build the local adapters."""

    config = load_config(config_path)
    return AppContext(
        config=config, driver=BearDatabaseDriver(), filesystem=LocalFileSystem()
    )
