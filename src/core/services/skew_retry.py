"""Controlador de reintentos por desfase de reloj (clock skew).

D2L rechaza firmas cuyo timestamp cae fuera de su ventana con un 403
`Timestamp out of range`, e incluye su hora actual (segundos) en el cuerpo.
Este módulo usa esa hora para corregir `UserContext.server_skew_millis` y
reintenta, como mucho `MAX_ATTEMPTS` veces en total.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable

import httpx
from core.clock import Clock, utc_now_millis
from core.domain.models import AttemptResult, UserContext
from core.interfaces.http import SignerFactory, Transport

logger = logging.getLogger(__name__)

VERSIONS_ROUTE = "/d2l/api/versions/"
MAX_ATTEMPTS = 3
SKEW_ERROR_PREFIX = "Timestamp out of range"

_DIGITS = re.compile(r"\d+")


def is_skew_error(result: AttemptResult) -> bool:
    return result.status_code == httpx.codes.FORBIDDEN and result.body.startswith(SKEW_ERROR_PREFIX)


def extract_server_time_millis(body: str) -> int | None:
    """Primera secuencia de dígitos del cuerpo, en segundos, pasada a ms."""

    match = _DIGITS.search(body)
    if match is None:
        return None
    return int(match.group()) * 1000


@dataclass(frozen=True)
class RetryOutcome:
    """Último resultado del bucle de intentos."""

    result: AttemptResult
    attempts: int
    exhausted: bool = False


class SkewRetryController:
    """Ejecuta la llamada firmada a `/d2l/api/versions/` corrigiendo el skew.

    Reglas:
    - Intentos estrictamente secuenciales; cada uno depende de la corrección
      calculada con la respuesta anterior.
    - `notify` recibe las líneas de progreso, solo con `verbose`.
    - Solo un 403 `Timestamp out of range` provoca reintento. Cualquier otra
      respuesta (o fallo de red) termina el bucle.
    """

    def __init__(
        self,
        user_context: UserContext,
        *,
        signer_factory: SignerFactory,
        transport_factory: Callable[[], Transport],
        notify: Callable[[str], None] | None = None,
        verbose: bool = False,
        clock: Clock = utc_now_millis,
    ) -> None:
        self._context = user_context
        self._signer_factory = signer_factory
        self._transport_factory = transport_factory
        self._notify = notify or (lambda _message: None)
        self._verbose = verbose
        self._clock = clock

    def _build_request(self) -> httpx.Request:
        request = httpx.Request("GET", self._context.host.base_url + VERSIONS_ROUTE)
        return self._signer_factory(self._context).sign(request)

    def _correct_skew(self, result: AttemptResult) -> bool:
        server_millis = extract_server_time_millis(result.body)
        if server_millis is None:
            logger.warning("Skew error without a server timestamp: %r", result.body)
            return False
        self._context.server_skew_millis = server_millis - self._clock()
        logger.debug("Server clock skew set to %d ms", self._context.server_skew_millis)
        return True

    def run(self) -> RetryOutcome:
        attempts = 0
        again = True
        result = AttemptResult()
        while again and attempts < MAX_ATTEMPTS:
            if self._verbose and attempts != 0:
                self._notify(f"Making attempt #{attempts + 1}")
            result = self._transport_factory().execute(self._build_request())
            attempts += 1
            again = is_skew_error(result) and self._correct_skew(result)

        exhausted = again and attempts == MAX_ATTEMPTS
        if exhausted and self._verbose:
            self._notify("Too much timestamp skew, giving up.")
        return RetryOutcome(result=result, attempts=attempts, exhausted=exhausted)
