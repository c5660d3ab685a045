"""Reloj UTC en milisegundos (inyectable en tests)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], int]


def utc_now_millis() -> int:
    """Milisegundos desde epoch (UTC)."""

    return int(datetime.now(timezone.utc).timestamp() * 1000)
