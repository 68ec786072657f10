"""Command-line interface (Typer-based).

Commands operate on the anchor file configured in :class:`Settings`::

    truetime now      # resolve, reconcile, print UTC now + elapsed while closed
    truetime status   # print the persisted anchor without resolving
    truetime clear    # delete the persisted anchor and first-run flag

Global options (``--log-level``, ``--log-format``, ``--env-file``,
``--version``) precede the command.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Annotated, get_args

import typer
from pydantic import ValidationError

from truetime._authority import TimeAuthority
from truetime._errors import StoreError
from truetime._logging import configure_logging
from truetime._settings import LoggingSettings, Settings
from truetime._signals import SuspendSignalHub
from truetime._sources import build_sources
from truetime._storage import JsonFileStore

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_RESOLUTION_FAILED = 2

_VALID_LOG_LEVELS: tuple[str, ...] = get_args(
    LoggingSettings.model_fields["level"].annotation,
)
_VALID_LOG_FORMATS: tuple[str, ...] = get_args(
    LoggingSettings.model_fields["format"].annotation,
)


@dataclass
class _CliState:
    settings: Settings

    def open_authority(self) -> TimeAuthority:
        try:
            store = JsonFileStore(self.settings.storage.path)
        except StoreError as exc:
            typer.echo(f"Storage error: {exc}", err=True)
            raise typer.Exit(EXIT_CONFIG_ERROR) from exc
        return TimeAuthority(
            build_sources(self.settings.sources),
            store,
            SuspendSignalHub(),
            regression_policy=self.settings.regression_policy,
            anchor_key=self.settings.storage.anchor_key,
            first_run_key=self.settings.storage.first_run_key,
        )


def _version() -> str:
    from truetime import __version__

    return __version__


def build_cli() -> typer.Typer:
    """Construct the ``truetime`` Typer application."""
    cli = typer.Typer(
        help="truetime — trusted UTC time and elapsed-while-closed accounting.",
        no_args_is_help=True,
    )

    @cli.callback(invoke_without_command=True)
    def main(
        ctx: typer.Context,
        version_flag: Annotated[
            bool | None,
            typer.Option("--version", is_eager=True, help="Show version and exit."),
        ] = None,
        log_level: Annotated[
            str | None,
            typer.Option("--log-level", help="Override log level."),
        ] = None,
        log_format: Annotated[
            str | None,
            typer.Option("--log-format", help="Override log format."),
        ] = None,
        env_file: Annotated[
            str,
            typer.Option("--env-file", help="Path to .env file."),
        ] = ".env",
    ) -> None:
        if version_flag:
            typer.echo(f"truetime v{_version()}")
            raise typer.Exit()

        if log_level is not None and log_level.upper() not in _VALID_LOG_LEVELS:
            raise typer.BadParameter(
                f"Invalid log level '{log_level}'. "
                f"Choose from: {', '.join(_VALID_LOG_LEVELS)}",
                param_hint="'--log-level'",
            )
        if log_format is not None and log_format.lower() not in _VALID_LOG_FORMATS:
            raise typer.BadParameter(
                f"Invalid log format '{log_format}'. "
                f"Choose from: {', '.join(_VALID_LOG_FORMATS)}",
                param_hint="'--log-format'",
            )

        try:
            settings = Settings(_env_file=env_file)  # type: ignore[call-arg]
        except ValidationError as exc:
            typer.echo(f"Configuration error: {exc}", err=True)
            raise typer.Exit(EXIT_CONFIG_ERROR) from exc

        if log_level is not None:
            settings.logging = settings.logging.model_copy(
                update={"level": log_level.upper()},
            )
        if log_format is not None:
            settings.logging = settings.logging.model_copy(
                update={"format": log_format.lower()},
            )

        configure_logging(settings.logging, version=_version())
        ctx.obj = _CliState(settings=settings)

    @cli.command()
    def now(ctx: typer.Context) -> None:
        """Resolve the time, reconcile the anchor and print the result."""
        state: _CliState = ctx.obj
        with state.open_authority() as authority:
            if not asyncio.run(authority.initialize()):
                typer.echo("Could not establish a trusted time.", err=True)
                raise typer.Exit(EXIT_RESOLUTION_FAILED)
            typer.echo(f"now_utc: {authority.now().isoformat()}")
            typer.echo(
                "elapsed_while_closed_s: "
                f"{authority.elapsed_while_closed.total_seconds():.3f}"
            )

    @cli.command()
    def status(ctx: typer.Context) -> None:
        """Print the persisted anchor without contacting any source."""
        state: _CliState = ctx.obj
        try:
            store = JsonFileStore(state.settings.storage.path)
        except StoreError as exc:
            typer.echo(f"Storage error: {exc}", err=True)
            raise typer.Exit(EXIT_CONFIG_ERROR) from exc
        storage = state.settings.storage
        anchor = store.get_string(storage.anchor_key, "") or "<none>"
        first_run = bool(store.get_int(storage.first_run_key, 1))
        typer.echo(f"store: {store.path}")
        typer.echo(f"last_recorded_utc: {anchor}")
        typer.echo(f"first_run: {str(first_run).lower()}")

    @cli.command()
    def clear(ctx: typer.Context) -> None:
        """Delete the persisted anchor and first-run flag."""
        state: _CliState = ctx.obj
        with state.open_authority() as authority:
            authority.clear_persistent_data()
        typer.echo("Persistent time data cleared.")

    return cli


def main() -> None:
    """Console-script entry point."""
    build_cli()()
