"""
===============================================================================
CRC CARD — infrastructure/services/system.py
===============================================================================

Componente:
  Adaptadores de sistema (reloj, ids, hashing de passwords)

Responsabilidades:
  - SystemClock: hora UTC real.
  - UuidGenerator: UUID v4.
  - Argon2PasswordHasher: hash/verify con argon2-cffi.

Colaboradores:
  - domain.services (Clock, IdGenerator, PasswordHasher)
  - argon2.PasswordHasher
===============================================================================
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID, uuid4

from argon2 import PasswordHasher as _Argon2
from argon2.exceptions import InvalidHashError, VerificationError


class SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class UuidGenerator:
    def new_id(self) -> UUID:
        return uuid4()


class Argon2PasswordHasher:
    """Hash de passwords con Argon2id (parámetros por defecto de argon2-cffi)."""

    def __init__(self, hasher: _Argon2 | None = None) -> None:
        self._hasher = hasher or _Argon2()

    def hash(self, password: str) -> str:
        return self._hasher.hash(password)

    def verify(self, password_hash: str, password: str) -> bool:
        try:
            return self._hasher.verify(password_hash, password)
        except (VerificationError, InvalidHashError):
            return False
