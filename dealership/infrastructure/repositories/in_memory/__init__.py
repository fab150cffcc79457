"""
In-Memory Repository Implementations.

For testing and local development. NOT FOR PRODUCTION.
Data is lost on process restart.
"""

from .base import InMemoryEntityStore
from .historial import InMemoryAuditRecordRepository
from .person import InMemoryPersonRepository
from .vehicle import InMemoryVehicleRepository

__all__ = [
    "InMemoryEntityStore",
    "InMemoryVehicleRepository",
    "InMemoryPersonRepository",
    "InMemoryAuditRecordRepository",
]
