# dealership/crosscutting/pagination.py
"""
===============================================================================
MÓDULO: Utilidades de paginación (offset por página)
===============================================================================

Objetivo
--------
Paginación simple y consistente para listados de entidades:
- page/limit normalizados contra Settings
- response genérico Page[T] con metadata (total_pages, has_next, has_prev)

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Componente:
  PageRequest + PageInfo + build_page

Responsabilidades:
  - Normalizar page/limit/order_direction
  - Armar metadata a partir de (page, limit, total)

Colaboradores:
  - domain.repositories.PaginatedResult (data + total)
  - application.usecases (listados)
===============================================================================
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Generic, List, Literal, TypeVar

from pydantic import BaseModel, Field, field_validator

T = TypeVar("T")

OrderDirection = Literal["asc", "desc"]


class PageRequest(BaseModel):
    page: int = Field(1, ge=1, description="Página (1-based)")
    limit: int = Field(15, ge=1, description="Items por página")
    order_by: str = Field("created_at", description="Campo de ordenamiento")
    order_direction: OrderDirection = Field("desc", description="asc | desc")

    @field_validator("order_direction", mode="before")
    @classmethod
    def normalize_direction(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    def clamped(self, max_limit: int) -> "PageRequest":
        """Devuelve una copia con limit acotado a max_limit."""
        return self.model_copy(update={"limit": min(self.limit, max_limit)})

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


class PageInfo(BaseModel):
    page: int = Field(description="Página actual")
    limit: int = Field(description="Items por página")
    total: int = Field(description="Total de items que matchean el filtro")
    total_pages: int = Field(description="Cantidad de páginas")
    has_next: bool = Field(description="Hay más items después de esta página")
    has_prev: bool = Field(description="Hay items antes de esta página")


@dataclass(frozen=True)
class Page(Generic[T]):
    """Página de resultados (items de dominio + metadata)."""

    items: List[T] = field(default_factory=list)
    page_info: PageInfo | None = None


def build_page(items: List[T], *, page: int, limit: int, total: int) -> Page[T]:
    total_pages = math.ceil(total / limit) if limit > 0 else 0
    return Page(
        items=list(items),
        page_info=PageInfo(
            page=page,
            limit=limit,
            total=total,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        ),
    )
