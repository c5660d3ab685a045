"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (HTTP/logging) lean config de forma consistente.

Nota: las credenciales (app id/key) nunca se leen de aquí; solo llegan por CLI.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "valence-check"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "valence-check"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "valence-check"
    return Path.home() / ".config" / "valence-check"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="VALENCE_CHECK_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request (segundos).",
    )
    user_agent: str = Field(
        default="valence-check/0.1",
        min_length=1,
        description="User-Agent enviado al LMS.",
    )
    verify_tls: bool = Field(
        default=True,
        description="Verificar certificados TLS del host.",
    )
    log_level: str = Field(
        default="WARNING",
        min_length=1,
        description="Nivel de logging interno (DEBUG/INFO/WARNING/ERROR).",
    )
