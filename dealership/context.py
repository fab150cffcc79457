"""
===============================================================================
TARJETA CRC — dealership/context.py (Contexto por operación)
===============================================================================

Responsabilidades:
  - Mantener contexto "operation-scoped" usando ContextVars (async-safe).
  - Correlacionar logs de un workflow (request_id + actor) sin pasar
    parámetros por todo el stack.

Colaboradores:
  - crosscutting.logger: enriquece logs leyendo get_context_dict().
  - capa HTTP/worker externa: setea el contexto al iniciar cada operación.

Restricciones:
  - Solo tipos primitivos (str) para serialización segura.
  - Defaults vacíos ("") para evitar None y simplificar JSON.
===============================================================================
"""

from __future__ import annotations

from contextvars import ContextVar
from typing import Final

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
actor_id_var: ContextVar[str] = ContextVar("actor_id", default="")

_CTX_REQUEST_ID: Final[str] = "request_id"
_CTX_ACTOR_ID: Final[str] = "actor_id"


def set_request_context(*, request_id: str = "", actor_id: str = "") -> None:
    """
    Setea el contexto mínimo de la operación.

    Regla:
      - Strings vacíos significan "no disponible".
    """
    request_id_var.set(request_id or "")
    actor_id_var.set(actor_id or "")


def get_context_dict() -> dict[str, str]:
    """Devuelve el contexto actual como dict, omitiendo claves vacías."""
    ctx: dict[str, str] = {}

    if val := request_id_var.get():
        ctx[_CTX_REQUEST_ID] = val
    if val := actor_id_var.get():
        ctx[_CTX_ACTOR_ID] = val

    return ctx


def clear_context() -> None:
    """Limpia el contexto al final de la operación."""
    request_id_var.set("")
    actor_id_var.set("")
