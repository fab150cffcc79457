"""
CRC — domain/services.py

Name
- Domain service ports (Clock, IdGenerator, PasswordHasher)

Responsibilities
- Abstract time, identity and password hashing so workflows stay
  deterministic under test.

Collaborators
- infrastructure.services: SystemClock, UuidGenerator, Argon2PasswordHasher
- tests: fixed clock + sequential ids
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID


class Clock(Protocol):
    def now(self) -> datetime:
        """R: Current UTC datetime (timezone-aware)."""
        ...


class IdGenerator(Protocol):
    def new_id(self) -> UUID:
        ...


class PasswordHasher(Protocol):
    def hash(self, password: str) -> str:
        """R: One-way hash of a plain password."""
        ...

    def verify(self, password_hash: str, password: str) -> bool:
        ...
