"""CLI principal (Typer).

Un único comando sin subcomandos: firma una llamada a `/d2l/api/versions/`,
corrige el clock skew si hace falta y reporta el resultado.

Códigos de salida: ver `core.services.response_interpreter.ExitCode`.
"""

from __future__ import annotations

import sys
from typing import Sequence

import typer
from pydantic import ValidationError

from adapters.http_client import HttpxTransport
from adapters.valence_auth import ValenceAuth
from cli.ui_components import configure_logging, echo_err, echo_out, render_report
from core.config import AppSettings
from core.domain.models import AppContext, CheckOptions
from core.interfaces.http import Transport
from core.services.response_interpreter import ExitCode, interpret
from core.services.skew_retry import SkewRetryController

app = typer.Typer(
    add_completion=False,
    help="Verify that a Valence app id/key pair can authenticate against an LMS.",
)

PROG_NAME = "valence-check"


def build_transport(settings: AppSettings) -> Transport:
    return HttpxTransport(settings)


def check(options: CheckOptions, settings: AppSettings | None = None) -> ExitCode:
    """Run the versions call with skew correction and print the diagnosis."""

    settings = settings or AppSettings()
    user_context = AppContext(options.app_id, options.app_key).create_anonymous_user_context(options.host)
    controller = SkewRetryController(
        user_context,
        signer_factory=ValenceAuth,
        transport_factory=lambda: build_transport(settings),
        notify=echo_out,
        verbose=options.verbose,
    )
    outcome = controller.run()

    report = interpret(outcome.result, verbose=options.verbose, guess=options.guess)
    render_report(report)
    return report.exit_code


@app.command()
def versions(
    ctx: typer.Context,
    app_id: str = typer.Option(..., "--appId", help="Valence Application ID"),
    app_key: str = typer.Option(..., "--appKey", help="Valence Application Key"),
    host: str = typer.Option(
        ...,
        "-h",
        "--host",
        help="URL for LMS, e.g. https://lms.valence.desire2learn.com. Defaults to http. Set port if needed.",
    ),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Print extra output"),
    guess: bool = typer.Option(
        False,
        "-g",
        "--guess",
        help="Make a short guess at what the error is if one occurs and print it to stdout",
    ),
) -> ExitCode:
    """Sign and send one request to /d2l/api/versions/ and report the result."""

    settings = AppSettings()
    configure_logging(settings.log_level, verbose=verbose)

    try:
        options = CheckOptions(app_id=app_id, app_key=app_key, host=host, verbose=verbose, guess=guess)
    except ValidationError as exc:
        echo_err(ctx.get_usage())
        echo_err(str(exc))
        return ExitCode.INVALID_ARGUMENTS

    return check(options, settings)


def run(argv: Sequence[str] | None = None) -> int:
    """Entry point: parse arguments, run the check, return the exit code."""

    args = list(sys.argv[1:] if argv is None else argv)
    try:
        result = app(args=args, prog_name=PROG_NAME, standalone_mode=False)
    except typer.Abort:
        return int(ExitCode.DECLINED)
    except typer.TyperException as exc:
        exc.show()
        return int(ExitCode.DECLINED)
    if isinstance(result, ExitCode):
        return int(result)
    # --help (typer Exit) returns a plain int, never an ExitCode.
    return int(ExitCode.DECLINED)


def main() -> None:
    raise SystemExit(run())
