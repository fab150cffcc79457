"""
===============================================================================
CRC CARD — infrastructure/db/pool.py
===============================================================================

Componente:
  Pool async de conexiones PostgreSQL (singleton por proceso)

Responsabilidades:
  - Inicializar, exponer y cerrar el AsyncConnectionPool.
  - Configurar cada conexión (statement_timeout).

Colaboradores:
  - psycopg_pool.AsyncConnectionPool
  - crosscutting.config (timeouts)

Principios:
  - Fail-fast (doble init, uso sin init)
  - Encapsulación (pool global único)
===============================================================================
"""

from __future__ import annotations

import asyncio
from typing import Optional

from psycopg import AsyncConnection
from psycopg_pool import AsyncConnectionPool

from ...crosscutting.logger import logger
from .errors import PoolAlreadyInitializedError, PoolNotInitializedError

_pool: Optional[AsyncConnectionPool] = None
_pool_lock = asyncio.Lock()


async def _configure_connection(conn: AsyncConnection) -> None:
    """Se ejecuta cuando el pool crea una conexión nueva."""
    from ...crosscutting.config import get_settings

    timeout_ms = int(get_settings().db_statement_timeout_ms)
    if timeout_ms > 0:
        await conn.execute(f"SET statement_timeout = {timeout_ms}")
        await conn.commit()


async def init_pool(database_url: str, min_size: int, max_size: int) -> AsyncConnectionPool:
    """Inicializa el pool (una vez por proceso)."""
    global _pool

    async with _pool_lock:
        if _pool is not None:
            raise PoolAlreadyInitializedError("El pool ya fue inicializado.")

        logger.info(
            "Inicializando pool DB",
            extra={"min_size": min_size, "max_size": max_size},
        )

        pool = AsyncConnectionPool(
            conninfo=database_url,
            min_size=min_size,
            max_size=max_size,
            configure=_configure_connection,
            open=False,
        )
        await pool.open(wait=True)
        _pool = pool

        logger.info("Pool DB inicializado")
        return _pool


def get_pool() -> AsyncConnectionPool:
    """Retorna el pool singleton."""
    if _pool is None:
        raise PoolNotInitializedError("Pool no inicializado. Llamar init_pool() primero.")
    return _pool


async def close_pool() -> None:
    """Cierra el pool (idempotente)."""
    global _pool

    async with _pool_lock:
        if _pool is not None:
            logger.info("Cerrando pool DB")
            try:
                await _pool.close()
            finally:
                _pool = None
            logger.info("Pool DB cerrado")
