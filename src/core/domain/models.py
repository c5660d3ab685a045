"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta (host, DTO de versiones) sin acoplar el Core a
  librerías de I/O.
- El DTO `VersionsItem` es justamente el contrato que se quiere verificar.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

from core.errors import InvalidHostError

_DEFAULT_PORTS = {"http": 80, "https": 443}


class HostSpec(BaseModel):
    """Destino LMS: solo esquema, host y puerto (la ruta se ignora)."""

    model_config = ConfigDict(frozen=True)

    scheme: str = Field(..., description="'http' o 'https'.")
    host: str = Field(..., min_length=1, description="Nombre de host o IP.")
    port: int = Field(..., gt=0, lt=65536, description="Puerto TCP.")

    @classmethod
    def parse(cls, url: str) -> "HostSpec":
        """Extrae esquema/host/puerto de una URL; sin esquema se asume http."""

        raw = url.strip()
        if "://" not in raw:
            raw = f"http://{raw}"
        parts = urlsplit(raw)
        scheme = parts.scheme.lower()
        if scheme not in _DEFAULT_PORTS:
            raise InvalidHostError(f"Unsupported URL scheme {parts.scheme!r} in {url!r}")
        try:
            port = parts.port
        except ValueError as exc:
            raise InvalidHostError(f"Invalid port in {url!r}") from exc
        if not parts.hostname:
            raise InvalidHostError(f"No host name in {url!r}")
        return cls(scheme=scheme, host=parts.hostname, port=port or _DEFAULT_PORTS[scheme])

    @property
    def base_url(self) -> str:
        host = f"[{self.host}]" if ":" in self.host else self.host
        return f"{self.scheme}://{host}:{self.port}"


class CheckOptions(BaseModel):
    """Configuración de una ejecución, validada una vez al arrancar.

    Inmutable: la CLI la construye y el resto del programa solo la lee.
    """

    model_config = ConfigDict(frozen=True)

    app_id: str = Field(..., min_length=1, description="Valence Application ID.")
    app_key: str = Field(..., min_length=1, description="Valence Application Key.")
    host: HostSpec = Field(..., description="LMS destino.")
    verbose: bool = Field(default=False, description="Imprimir salida extra.")
    guess: bool = Field(
        default=False,
        description="Imprimir una conjetura corta del error en stdout.",
    )

    @field_validator("host", mode="before")
    @classmethod
    def _parse_host(cls, value: object) -> object:
        if isinstance(value, str):
            return HostSpec.parse(value)
        return value


class VersionsItem(BaseModel):
    """Elemento de la respuesta de `/d2l/api/versions/`.

    Modo estricto: los tres campos son obligatorios y no se coercionan tipos.
    """

    model_config = ConfigDict(strict=True, extra="ignore")

    ProductCode: str
    LatestVersion: str
    SupportedVersions: list[str]


class AttemptResult(BaseModel):
    """Resultado de un intento HTTP (o del fallo de transporte que lo impidió).

    `status_code == 0` indica que no hubo respuesta; entonces `error_message`
    explica el motivo.
    """

    model_config = ConfigDict(frozen=True)

    status_code: int = Field(default=0, ge=0)
    reason: str | None = Field(default=None, description="Status description.")
    headers: list[tuple[str, str]] = Field(default_factory=list)
    body: str = Field(default="")
    error_message: str | None = Field(default=None)


@dataclass(frozen=True)
class AppContext:
    """Identidad de la aplicación (par id/key precompartido)."""

    app_id: str
    app_key: str

    def create_anonymous_user_context(self, host: HostSpec) -> "UserContext":
        return UserContext(app_id=self.app_id, app_key=self.app_key, host=host)


@dataclass
class UserContext:
    """Contexto de llamada anónimo usado para firmar.

    `server_skew_millis` es lo único mutable: el controlador de reintentos lo
    corrige entre intentos cuando el servidor rechaza el timestamp.
    """

    app_id: str
    app_key: str
    host: HostSpec
    server_skew_millis: int = 0
