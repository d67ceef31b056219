"""Typer application and CLI entry point for specflat.

Commands:

* ``specflat entrypoints SOURCE`` -- the flattened, typed operations.
* ``specflat diagnostics SOURCE`` -- everything extraction had to drop.
* ``specflat info SOURCE`` -- document metadata and counts.

``SOURCE`` is a file path, an ``http(s)://`` URL, or ``-`` for stdin.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler, invokes the Typer app, and
turns unexpected exceptions into a crash log under the data directory.

See Also:
    :mod:`specflat.config`: Configuration precedence resolved in :func:`main_callback`.
    :mod:`specflat.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from specflat import __version__
from specflat.exit_codes import EXIT_DIAGNOSTICS, EXIT_GENERIC_FAILURE, EXIT_SUCCESS
from specflat.models import Entrypoint, GlobalConfig, ParsedSpec
from specflat.output import OutputFormat, debug, error, get_output, info, warning


app = typer.Typer(
    name="specflat",
    help="Flatten OpenAPI 3.0 documents into typed entrypoints.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"specflat {__version__}")
        raise typer.Exit(code=EXIT_SUCCESS)


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
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
    strict: Optional[bool] = typer.Option(
        None,
        "--strict/--lenient",
        help="Reject unknown document fields (other than x- extensions).",
    ),
    fail_on_diagnostics: Optional[bool] = typer.Option(
        None,
        "--fail-on-diagnostics/--allow-diagnostics",
        help="Exit with code 8 when anything had to be dropped.",
    ),
) -> None:
    """Root callback executed before every sub-command.

    Resolves the effective :class:`~specflat.models.GlobalConfig`, configures
    logging, installs the global :class:`~specflat.output.OutputManager`, and
    stores the config in ``ctx.obj`` for sub-commands.
    """
    from specflat.config import resolve_config
    from specflat.exceptions import InvalidUsageError, SpecflatError
    from specflat.output import OutputManager, set_output

    cli_format: Optional[str] = None
    if json_output:
        cli_format = OutputFormat.JSON.value
    elif plain_output:
        cli_format = OutputFormat.PLAIN.value

    try:
        if json_output and plain_output:
            raise InvalidUsageError("--json and --plain cannot be combined")
        config = resolve_config(
            cli_strict=strict,
            cli_format=cli_format,
            cli_log_level="DEBUG" if verbose else None,
            cli_fail_on_diagnostics=fail_on_diagnostics,
        )
        try:
            fmt = OutputFormat(config.output.format)
        except ValueError:
            raise InvalidUsageError(
                f"Unknown output format '{config.output.format}'"
            ) from None
    except SpecflatError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    logging.basicConfig(
        level=config.log_level,
        format="%(levelname)s %(name)s: %(message)s",
        force=True,
    )
    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


def _config(ctx: typer.Context) -> GlobalConfig:
    if ctx.obj and "config" in ctx.obj:
        return ctx.obj["config"]
    return GlobalConfig()


def _load(source: str, config: GlobalConfig) -> ParsedSpec:
    """Load and flatten *source*, exiting with the error's code on failure."""
    from specflat.exceptions import SpecflatError
    from specflat.parser import extract_spec, load_spec, validate_openapi_version

    debug(f"Loading document from {source}")
    try:
        raw = load_spec(source)
        version = validate_openapi_version(raw)
        return extract_spec(raw, version, strict=config.strict)
    except SpecflatError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None


def _finish(parsed: ParsedSpec, config: GlobalConfig) -> None:
    if parsed.diagnostics and config.fail_on_diagnostics:
        raise typer.Exit(code=EXIT_DIAGNOSTICS)


def _entrypoint_row(ep: Entrypoint) -> list[str]:
    from specflat.parser import describe_type

    args = ", ".join(
        f"{arg.name}: {describe_type(arg.type)} ({arg.location.value})" for arg in ep.args
    )
    body = "-"
    if ep.request_body is not None:
        body = f"{describe_type(ep.request_body.type)} ({ep.request_body.content_type})"
    responses = ", ".join(
        f"{resp.status_code}: {describe_type(resp.type)}"
        if resp.type is not None
        else f"{resp.status_code}: -"
        for resp in ep.responses
    )
    return [
        ep.method.value.upper(),
        ep.route,
        ep.operation_id,
        args or "-",
        body,
        responses or "-",
    ]


@app.command("entrypoints")
def entrypoints_command(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Document path, URL, or '-' for stdin."),
) -> None:
    """List the typed entrypoints of an OpenAPI document.

    Example::

        specflat entrypoints petstore.yaml
        specflat --json entrypoints https://example.com/openapi.json
    """
    config = _config(ctx)
    parsed = _load(source, config)
    output = get_output()

    if output.format == OutputFormat.JSON:
        output.print_records(
            [ep.model_dump(mode="json", by_alias=True) for ep in parsed.entrypoints]
        )
    else:
        output.print_table(
            ["Method", "Route", "Operation", "Args", "Body", "Responses"],
            [_entrypoint_row(ep) for ep in parsed.entrypoints],
            title=f"{parsed.info.title} -- Entrypoints ({len(parsed.entrypoints)})",
        )

    for diagnostic in parsed.diagnostics:
        warning(str(diagnostic))
    _finish(parsed, config)


@app.command("diagnostics")
def diagnostics_command(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Document path, URL, or '-' for stdin."),
) -> None:
    """List the parameters, responses and operations that had to be dropped."""
    config = _config(ctx)
    parsed = _load(source, config)

    if not parsed.diagnostics:
        info("No diagnostics.")
        return

    get_output().print_table(
        ["Method", "Route", "Target", "Error", "Message"],
        [
            [d.method.value.upper(), d.route, d.target, d.error, d.message]
            for d in parsed.diagnostics
        ],
        title=f"Diagnostics ({len(parsed.diagnostics)})",
    )
    _finish(parsed, config)


@app.command("info")
def info_command(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Document path, URL, or '-' for stdin."),
) -> None:
    """Show document metadata with entrypoint and diagnostic counts."""
    config = _config(ctx)
    parsed = _load(source, config)

    rows = [
        ["Title", parsed.info.title],
        ["Version", parsed.info.version],
        ["OpenAPI", parsed.openapi_version],
        ["Servers", ", ".join(s.url for s in parsed.servers) or "-"],
        ["Entrypoints", str(len(parsed.entrypoints))],
        ["Diagnostics", str(len(parsed.diagnostics))],
    ]
    if parsed.info.description:
        rows.append(["Description", parsed.info.description])
    get_output().print_table(["Field", "Value"], rows, title=parsed.info.title)


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log() -> str:
    """Write the current traceback under the data directory and return its path."""
    from specflat.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"crash-{datetime.now().strftime('%Y%m%d-%H%M%S')}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``specflat`` console script.

    :class:`~specflat.exceptions.SpecflatError` exits with the error's
    ``exit_code``; anything else writes a crash log and exits with
    :data:`~specflat.exit_codes.EXIT_GENERIC_FAILURE`.
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
        from specflat.exceptions import SpecflatError

        if isinstance(exc, SpecflatError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log()
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
