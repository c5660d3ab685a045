"""Contratos del firmador y del transporte HTTP.

Por qué Protocol:
- El controlador de reintentos solo necesita "firmar" y "ejecutar"; no conoce
  el esquema de firma de D2L ni el cliente HTTP concreto.
- Permite tests con dobles simples sin red.
"""

from __future__ import annotations

from typing import Callable, Protocol, runtime_checkable

import httpx

from core.domain.models import AttemptResult, UserContext


@runtime_checkable
class RequestSigner(Protocol):
    """Añade la autenticación a una request saliente."""

    def sign(self, request: httpx.Request) -> httpx.Request:
        ...


@runtime_checkable
class Transport(Protocol):
    """Envía una request y devuelve siempre un `AttemptResult`.

    Reglas de diseño:
    - Nunca lanza por errores de red: los reporta en `error_message`.
    """

    def execute(self, request: httpx.Request) -> AttemptResult:
        ...


SignerFactory = Callable[[UserContext], RequestSigner]
