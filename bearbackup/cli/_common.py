"""Shared helpers for bear-backup CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click

from ..app import AppContext, bootstrap
from ..config import ConfigError, MissingConfigError

CONTEXT_SETTINGS: dict[str, Any] = {"help_option_names": ["-h", "--help"]}


class BearBackupCliError(click.ClickException):
    """Shared Click exception wrapper for CLI failures."""


def get_app(ctx: click.Context) -> AppContext:
    """Return a cached AppContext for the current CLI invocation."""

    app: AppContext | None = ctx.obj.get("app")
    if app is not None:
        return app

    config_path_opt: Path | None = ctx.obj.get("config_path")

    try:
        app = bootstrap(config_path_opt)
    except MissingConfigError as exc:
        raise BearBackupCliError(
            f"{exc}. Run 'bear-backup config' to create one."
        ) from exc
    except ConfigError as exc:
        raise BearBackupCliError(str(exc)) from exc

    ctx.obj["app"] = app
    return app
