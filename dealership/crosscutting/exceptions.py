"""
===============================================================================
MÓDULO: Excepciones tipadas del back-office
===============================================================================

Objetivo
--------
Tener excepciones coherentes, con:
- error_code estable (el cliente decide por código, no por texto)
- error_id para correlación con logs
- message "humana" (sin filtrar secretos)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  DealershipError + DatabaseError

Responsabilidades:
  - Base común para errores de dominio (domain/errors.py) e infraestructura
  - Generar error_id para rastreo

Colaboradores:
  - domain/errors.py (taxonomía de negocio)
  - infrastructure/repositories/postgres (DatabaseError)
  - capa de transporte externa (mapea error_code -> status)
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from uuid import uuid4


@dataclass(frozen=True)
class ErrorResponse:
    """Estructura mínima para responder errores de forma consistente."""

    error_code: str
    message: str
    error_id: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "error_code": self.error_code,
            "message": self.message,
            "error_id": self.error_id,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class DealershipError(Exception):
    """
    Base para todos los errores del core.

    Subclases fijan `error_code` y pueden sobreescribir `details()` para
    exponer contexto de diagnóstico (estado actual, destinos válidos, etc.).
    """

    error_code: str = "DEALERSHIP_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)

    def details(self) -> dict[str, Any]:
        return {}

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error_code=self.error_code,
            message=self.message,
            error_id=self.error_id,
            details=self.details(),
        )


class DatabaseError(DealershipError):
    """Errores de DB (conexión, query, timeout, pool)."""

    error_code: str = "DATABASE_ERROR"
