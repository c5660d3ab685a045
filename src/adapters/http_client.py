"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeout, headers y TLS para todas las llamadas al LMS.
- Convierte fallos de red en `AttemptResult` en vez de excepciones.
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.
"""

from __future__ import annotations

import logging

import httpx

from core.config import AppSettings
from core.domain.models import AttemptResult

logger = logging.getLogger(__name__)


def build_client(
    settings: AppSettings | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """Crea un `httpx.Client` con defaults seguros.

    Sin redirects: un 302 hacia el login del LMS es información de diagnóstico,
    no algo que seguir.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    return httpx.Client(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=False,
        verify=settings.verify_tls,
        headers=headers,
        transport=transport,
    )


def result_from_response(response: httpx.Response) -> AttemptResult:
    return AttemptResult(
        status_code=response.status_code,
        reason=response.reason_phrase or None,
        headers=[(name.decode("latin-1"), value.decode("latin-1")) for name, value in response.headers.raw],
        body=response.text,
    )


class HttpxTransport:
    """Transporte síncrono: un cliente nuevo por intento, cerrado al terminar."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._transport = transport

    def execute(self, request: httpx.Request) -> AttemptResult:
        try:
            with build_client(self._settings, transport=self._transport) as client:
                for name, value in client.headers.items():
                    request.headers.setdefault(name, value)
                request.extensions.setdefault("timeout", client.timeout.as_dict())
                response = client.send(request)
                return result_from_response(response)
        except httpx.HTTPError as exc:
            logger.warning("%s %s%s failed: %s", request.method, request.url.host, request.url.path, exc)
            return AttemptResult(error_message=str(exc) or exc.__class__.__name__)
