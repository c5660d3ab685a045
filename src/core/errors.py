"""Jerarquia de errores del Core.

Solo cubre errores de entrada local: los fallos de red y de autenticación
nunca se lanzan, se reportan como `AttemptResult`.
"""

from __future__ import annotations


class ValenceCheckError(Exception):
    """Error base de valence-check."""


class InvalidHostError(ValenceCheckError, ValueError):
    """La URL del LMS no tiene un esquema/host utilizable."""
