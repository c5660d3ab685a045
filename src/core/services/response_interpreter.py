"""Interpretación de la respuesta final.

Por qué separado de la CLI:
- Convierte el último `AttemptResult` en código de salida + líneas a imprimir.
- Las reglas de clasificación quedan libres de efectos (consola); la CLI
  solo renderiza el `Report`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Iterable

import httpx
from pydantic import TypeAdapter, ValidationError

from core.domain.models import AttemptResult, VersionsItem
from core.services.skew_retry import is_skew_error

INVALID_TOKEN_BODY = "Invalid token"

_VERSIONS = TypeAdapter(list[VersionsItem])
_LINE_BREAK = re.compile(r"\r\n|\n")


class ExitCode(IntEnum):
    """Códigos de salida del proceso."""

    SUCCESS = 0
    DECLINED = -1
    INVALID_ARGUMENTS = -2
    DESERIALIZE_FAILURE = -3
    REQUEST_FAILURE = -4


class Verdict(str, Enum):
    SUCCESS = "success"
    DESERIALIZE_FAILURE = "deserialize-failure"
    GUESSED_FAILURE = "guessed-failure"
    REPORTED_FAILURE = "reported-failure"


@dataclass
class Report:
    """Qué imprimir (stdout/stderr) y con qué código salir."""

    verdict: Verdict
    exit_code: ExitCode
    stdout: list[str] = field(default_factory=list)
    stderr: list[str] = field(default_factory=list)


def indent(text: str) -> str:
    """Indenta cada línea física de `text` con dos espacios."""

    return "\n".join("  " + line for line in _LINE_BREAK.split(text))


def format_headers(headers: Iterable[tuple[str, str]]) -> list[str]:
    return [indent(f"{name}: {value}") for name, value in headers]


def parse_versions(body: str) -> list[VersionsItem]:
    """Valida el cuerpo de éxito; lanza `pydantic.ValidationError`."""

    return _VERSIONS.validate_json(body)


def guess_failure(result: AttemptResult) -> str:
    """Diagnóstico best-effort, en una línea, de una llamada fallida."""

    forbidden = result.status_code == httpx.codes.FORBIDDEN
    if forbidden and result.body == INVALID_TOKEN_BODY:
        return "App not synced to LMS or explicitly denied in Manage Extensibility."
    if is_skew_error(result):
        return "Timestamp skew could not be rectified."
    if result.error_message:
        return result.error_message
    return "Unknown error"


def _success(result: AttemptResult, *, verbose: bool) -> Report:
    try:
        parse_versions(result.body)
    except ValidationError as exc:
        stderr = [
            "Call succeeded but could not deserialize the response.",
            "Error: " + indent(str(exc)),
        ]
        if result.body:
            stderr += ["Response:", indent(result.body)]
        return Report(Verdict.DESERIALIZE_FAILURE, ExitCode.DESERIALIZE_FAILURE, stderr=stderr)

    stdout = ["Ok"]
    if verbose:
        stdout.append("Response headers:")
        stdout += format_headers(result.headers)
        stdout += ["Response body:", indent(result.body)]
    return Report(Verdict.SUCCESS, ExitCode.SUCCESS, stdout=stdout)


def _failure_dump(result: AttemptResult) -> list[str]:
    lines = ["Failure!"]
    if result.error_message is not None:
        lines += ["Error: ", indent(result.error_message)]
    if result.reason is not None:
        lines += ["Response status: ", indent(result.reason)]
    lines += format_headers(result.headers)
    if result.body:
        lines += ["Response: ", indent(result.body)]
    return lines


def interpret(result: AttemptResult, *, verbose: bool = False, guess: bool = False) -> Report:
    """Clasifica el intento final; gana la primera regla que aplica."""

    if result.status_code == httpx.codes.OK:
        return _success(result, verbose=verbose)
    if guess:
        return Report(Verdict.GUESSED_FAILURE, ExitCode.REQUEST_FAILURE, stdout=[guess_failure(result)])
    return Report(Verdict.REPORTED_FAILURE, ExitCode.REQUEST_FAILURE, stderr=_failure_dump(result))
