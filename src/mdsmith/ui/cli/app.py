"""Typer application wiring for the mdsmith CLI."""

from __future__ import annotations

import typer

from mdsmith.core.config import load_config
from mdsmith.core.exceptions import ConfigError, exception_hint
from mdsmith.transforms import available_transforms
from mdsmith.version import get_version

from ._options import ConfigOption, DebugOption, VerbosityOption
from .commands import build_transform_command
from .state import debug_enabled, emit_error, get_cli_state, set_cli_state


app = typer.Typer(
    help="Convert markdown cross-references and reflow paragraphs.",
    context_settings={"help_option_names": ["-h", "--help"]},
    no_args_is_help=True,
    add_completion=False,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(get_version())
        raise typer.Exit()


@app.callback()
def configure(
    ctx: typer.Context,
    verbose: VerbosityOption = 0,
    debug: DebugOption = False,
    config: ConfigOption = None,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the mdsmith version and exit.",
    ),
) -> None:
    """Convert markdown cross-references and reflow paragraphs."""
    _ = version
    state = set_cli_state(ctx=ctx, verbosity=verbose, debug=debug)
    try:
        state.config = load_config(config)
    except ConfigError as exc:
        emit_error(str(exc), exception=exc)
        raise typer.Exit(code=1) from exc


for _spec in available_transforms():
    app.command(name=_spec.slug, help=_spec.description)(build_transform_command(_spec))


def main() -> None:
    """Entry point compatible with console scripts."""
    try:
        app()
    except typer.Exit:
        raise
    except KeyboardInterrupt as exc:
        if debug_enabled():
            raise
        emit_error("Operation cancelled by user.", exception=exc)
        raise typer.Exit(code=1) from exc
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover
        state = get_cli_state()
        if state.show_tracebacks:
            from rich.traceback import Traceback

            tb = Traceback.from_exception(
                type(exc),
                exc,
                exc.__traceback__,
                show_locals=state.verbosity >= 2,
            )
            state.err_console.print(tb)
        else:
            emit_error(exception_hint(exc) or type(exc).__name__, exception=exc)
        raise typer.Exit(code=1) from exc


__all__ = ["app", "main"]
