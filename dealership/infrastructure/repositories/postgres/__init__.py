"""
PostgreSQL Repository Implementations (psycopg 3, async pool).
"""

from .base import PostgresEntityStore
from .historial import PostgresAuditRecordRepository
from .person import PostgresPersonRepository
from .vehicle import PostgresVehicleRepository

__all__ = [
    "PostgresEntityStore",
    "PostgresVehicleRepository",
    "PostgresPersonRepository",
    "PostgresAuditRecordRepository",
]
