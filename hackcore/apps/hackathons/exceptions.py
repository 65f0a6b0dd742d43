# hackcore/apps/hackathons/exceptions.py
"""
Errores del motor de fases y puntajes.

La validación de entradas usa django.core.exceptions.ValidationError (la misma
que lanzan los modelos en clean()); aquí solo viven los errores propios.
"""
from __future__ import annotations


class EngineError(Exception):
    """Base de los errores del motor."""

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class AuthorizationError(EngineError):
    """El llamador no tiene el rol requerido (organizer, líder, juez asignado)."""


class PhaseViolationError(EngineError):
    """Acción autorizada por rol pero fuera de su ventana de tiempo."""

    def __init__(self, action: str, message: str):
        super().__init__(message)
        self.action = action


class ConflictError(EngineError):
    """El estado actual impide la acción (ya inscrito, equipo lleno, etc.)."""


class PersistenceError(EngineError):
    """Falló o expiró el paso transaccional; reintentar es seguro."""
