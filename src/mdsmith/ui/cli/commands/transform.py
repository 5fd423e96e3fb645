"""Build one CLI command per registered transform."""

from __future__ import annotations

from collections.abc import Callable
import logging

import typer

from mdsmith.core.exceptions import MdsmithError
from mdsmith.transforms import TransformSpec

from .._options import InputPathArgument, WriteOption
from ..diagnostics import CliEmitter
from ..state import emit_error, get_cli_state
from ..utils import read_document, read_inputs, write_if_changed


logger = logging.getLogger(__name__)


def build_transform_command(spec: TransformSpec) -> Callable[..., None]:
    """Return a Typer command function applying ``spec``."""

    def command(
        ctx: typer.Context,
        files: InputPathArgument = None,
        write: WriteOption = False,
    ) -> None:
        if write and not files:
            raise typer.BadParameter("--write requires at least one file.", param_hint="FILES")

        state = get_cli_state(ctx)
        emitter = CliEmitter(state)
        try:
            if write:
                for path in files or ():
                    original = read_document(path)
                    updated = spec.apply(original, state.config, emitter)
                    if write_if_changed(path, original, updated):
                        logger.debug("%s: rewrote %s", spec.slug, path)
                return

            content = read_inputs(files)
            result = spec.apply(content, state.config, emitter)
        except (MdsmithError, OSError) as exc:
            if state.show_tracebacks:
                raise
            emit_error(str(exc), exception=exc)
            raise typer.Exit(code=1) from exc

        typer.echo(result, nl=False)

    command.__name__ = spec.slug
    command.__doc__ = spec.description
    return command


__all__ = ["build_transform_command"]
