"""Typer application and CLI entry point for reqbody.

This module wires the top-level Typer application and registers the built-in
sub-commands (``parse``, ``match``, ``parsers``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Library errors exit with their own exit code; any other
exception is written to a crash log under the data directory.

See Also:
    :mod:`reqbody.config`: Configuration resolution.
    :mod:`reqbody.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer

from reqbody import __version__
from reqbody.commands.config import config_app
from reqbody.commands.list_parsers import parsers_command
from reqbody.commands.match import match_command
from reqbody.commands.parse import parse_command
from reqbody.exit_codes import EXIT_GENERIC_FAILURE

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

app = typer.Typer(
    name="reqbody",
    help="Load and parse HTTP request bodies declared by OpenAPI operations.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("parse")(parse_command)
app.command("match")(match_command)
app.command("parsers")(parsers_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"reqbody {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Send library debug logs to stderr when ``--verbose`` is given."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format=LOG_FORMAT, stream=sys.stderr)
        logging.getLogger("reqbody").setLevel(logging.DEBUG)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output and resolver logs."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~reqbody.output.OutputManager` built from
    the output flags, configures logging, and stores ``verbose`` in
    ``ctx.obj``.
    """
    from reqbody.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log() -> str:
    """Write the current traceback to the data directory and return its path."""
    from reqbody.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``reqbody`` console script.

    Unhandled :class:`~reqbody.exceptions.ReqbodyError` instances cause a
    clean exit with the error's ``exit_code``. All other exceptions produce a
    crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from reqbody.exceptions import ReqbodyError
        from reqbody.output import error

        if isinstance(exc, ReqbodyError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log()
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
