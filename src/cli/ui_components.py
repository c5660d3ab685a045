"""Componentes de UI para CLI.

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- El texto del servidor (cuerpo, headers, errores) se escribe tal cual con
  `typer.echo`: Rich expandiría tabs y quitaría caracteres de control.
- Rich queda para el logging interno.
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from core.services.response_interpreter import Report


def echo_out(line: str) -> None:
    typer.echo(line)


def echo_err(line: str) -> None:
    typer.echo(line, err=True)


def render_report(report: Report) -> None:
    for line in report.stdout:
        echo_out(line)
    for line in report.stderr:
        echo_err(line)


def configure_logging(level: str, *, verbose: bool = False) -> None:
    """Logging interno hacia stderr vía `RichHandler`.

    No-op si el root logger ya tiene handlers (p.ej. bajo pytest).
    """

    logging.basicConfig(
        level=logging.DEBUG if verbose else level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )
