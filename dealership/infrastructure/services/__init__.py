"""
Infrastructure services: implementaciones de los puertos de domain/services.py.
"""

from .system import Argon2PasswordHasher, SystemClock, UuidGenerator

__all__ = ["SystemClock", "UuidGenerator", "Argon2PasswordHasher"]
