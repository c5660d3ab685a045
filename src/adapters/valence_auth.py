"""Firma ID/key de D2L Valence sobre `httpx.Request`.

Esquema:
- Base string: `METHOD&/ruta/en/minusculas&timestamp` (timestamp en segundos).
- Firma: HMAC-SHA256 con la app key, base64 URL-safe sin padding `=`.
- Parámetros: `x_a` (app id), `x_b` (user id), `x_c` (firma app),
  `x_d` (firma user), `x_t` (timestamp). En contexto anónimo `x_b`/`x_d` van vacíos.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import httpx

from core.clock import Clock, utc_now_millis
from core.domain.models import UserContext


def compute_signature(key: str, base_string: str) -> str:
    digest = hmac.new(key.encode("utf-8"), base_string.encode("utf-8"), hashlib.sha256).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


class ValenceAuth:
    """Firma requests con un `UserContext` anónimo.

    El timestamp se calcula al firmar, aplicando `server_skew_millis` del
    contexto, así que cada intento usa la corrección vigente.
    """

    def __init__(self, user_context: UserContext, *, clock: Clock = utc_now_millis) -> None:
        self._context = user_context
        self._clock = clock

    def timestamp(self) -> int:
        return (self._clock() + self._context.server_skew_millis) // 1000

    def signing_params(self, method: str, path: str) -> dict[str, str]:
        timestamp = str(self.timestamp())
        base_string = f"{method.upper()}&{path.lower()}&{timestamp}"
        return {
            "x_a": self._context.app_id,
            "x_b": "",
            "x_c": compute_signature(self._context.app_key, base_string),
            "x_d": "",
            "x_t": timestamp,
        }

    def sign(self, request: httpx.Request) -> httpx.Request:
        params = self.signing_params(request.method, request.url.path)
        request.url = request.url.copy_merge_params(params)
        return request
