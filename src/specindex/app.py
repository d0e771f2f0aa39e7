"""Typer application and CLI entry point for specindex.

This module wires together the top-level Typer application and the ``build``
command, which resolves a :class:`~specindex.models.BuildConfig` and hands
it to :func:`~specindex.pipeline.run_build`.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory and
the process exits non-zero.

See Also:
    :mod:`specindex.config`: Configuration precedence resolution.
    :mod:`specindex.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer
from rich.logging import RichHandler

from specindex import __version__
from specindex.exceptions import SpecIndexError
from specindex.exit_codes import EXIT_GENERIC_FAILURE, EXIT_INTERRUPTED
from specindex.models import ProductsFormat


app = typer.Typer(
    name="specindex",
    help="Flatten a vendor OpenAPI spec into spec.json and a products list.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"specindex {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool, console: Any) -> None:
    """Route the package's ``logging`` records through Rich on stderr."""
    logger = logging.getLogger("specindex")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = RichHandler(console=console, show_path=False)
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Print the build summary as JSON on stdout."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress progress output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging on stderr."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~specindex.output.OutputManager` and
    logging from CLI flags.
    """
    from specindex.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet)
    set_output(output)
    _configure_logging(verbose, output.stderr_console)


@app.command("build")
def build_command(
    source: Optional[str] = typer.Option(
        None, "--source", "-s", help="Spec URL, file path, or '-' for stdin."
    ),
    output_dir: Optional[str] = typer.Option(
        None, "--output-dir", "-o", help="Directory for spec.json and products."
    ),
    products_format: Optional[ProductsFormat] = typer.Option(
        None, "--products-format", help="Products artifact language."
    ),
    vendor: Optional[str] = typer.Option(
        None, "--vendor", help="Vendor name for the products header."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Fetch timeout in seconds."
    ),
    legacy_shared_visited: bool = typer.Option(
        False,
        "--legacy-shared-visited",
        help="Share the $ref cycle guard across sibling branches (legacy output).",
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Compute everything, write nothing."
    ),
) -> None:
    """Fetch the OpenAPI spec and write spec.json plus the products list.

    Example::

        specindex build
        specindex build --source ./openapi.yaml --output-dir build/data
        specindex --json build --dry-run
    """
    from specindex.config import resolve_config
    from specindex.output import OutputFormat, error, get_output, success
    from specindex.pipeline import run_build

    try:
        config = resolve_config(
            {
                "source": source,
                "output_dir": output_dir,
                "products_format": products_format,
                "vendor": vendor,
                "timeout": timeout,
                "shared_visited": True if legacy_shared_visited else None,
            }
        )
        result = run_build(config, dry_run=dry_run)
    except SpecIndexError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    output = get_output()
    if output.format == OutputFormat.JSON:
        output.print_json(result.model_dump(mode="json"))
    elif dry_run:
        rows = [
            [product, str(result.product_counts.get(product, 0))]
            for product in result.products
        ]
        output.print_table(
            ["Product", "Paths"], rows, title=f"{result.banner} -- Products ({len(rows)})"
        )
    else:
        success(f"Built {result.endpoint_count} endpoints across {len(result.products)} products")


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_INTERRUPTED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from specindex.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``specindex`` console script.

    :class:`~specindex.exceptions.SpecIndexError` instances cause a clean
    exit with the error's ``exit_code``. All other exceptions are logged to
    stderr, written to a crash log, and exit with a generic failure code.

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
        sys.exit(EXIT_INTERRUPTED)
    except Exception as exc:
        from specindex.output import error

        if isinstance(exc, SpecIndexError):
            error(str(exc))
            sys.exit(exc.exit_code)

        error(f"{type(exc).__name__}: {exc}")
        try:
            log_path = _write_crash_log(exc)
        except OSError:
            pass
        else:
            error(f"Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
