"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Provide reusable test fixtures (clock, ids, hasher, stores, historial)
  - Configure test environment (no .env, in-memory stores)
  - Setup test data factories for vehicles and persons

Collaborators:
  - pytest / pytest-asyncio: Test framework (asyncio_mode = "auto")
  - dealership.domain: Entities and protocols
  - dealership.infrastructure.repositories.in_memory: Store fakes

Notes:
  - Fixtures are auto-discovered by pytest
  - Every fixture is function-scoped for per-test isolation
"""

import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List
from uuid import UUID

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("LOG_JSON", "false")

from dealership.crosscutting import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None

from dealership.application.historial_service import HistorialService  # noqa: E402
from dealership.domain.entities import Person, Vehicle  # noqa: E402
from dealership.infrastructure.repositories.in_memory import (  # noqa: E402
    InMemoryAuditRecordRepository,
    InMemoryPersonRepository,
    InMemoryVehicleRepository,
)

FIXED_NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests (require PostgreSQL)"
    )


# ============================================================================
# Deterministic services
# ============================================================================


class FixedClock:
    """Reloj controlable: now() fijo hasta que el test llame advance()."""

    def __init__(self, start: datetime = FIXED_NOW):
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **delta: float) -> datetime:
        self.current = self.current + timedelta(**delta)
        return self.current


class SequentialIds:
    """UUIDs predecibles: 00000000-0000-0000-0000-000000000001, ..."""

    def __init__(self) -> None:
        self.issued: List[UUID] = []

    def new_id(self) -> UUID:
        value = UUID(int=len(self.issued) + 1)
        self.issued.append(value)
        return value


class FakePasswordHasher:
    """Hash reversible y barato; suficiente para verificar el wiring."""

    PREFIX = "hashed:"

    def hash(self, password: str) -> str:
        return f"{self.PREFIX}{password}"

    def verify(self, password_hash: str, password: str) -> bool:
        return password_hash == f"{self.PREFIX}{password}"


@pytest.fixture
def clock() -> FixedClock:
    """R: Deterministic clock shared by stores and use cases."""
    return FixedClock()


@pytest.fixture
def id_generator() -> SequentialIds:
    """R: Predictable id generator."""
    return SequentialIds()


@pytest.fixture
def password_hasher() -> FakePasswordHasher:
    """R: Fake password hasher (prefix-based)."""
    return FakePasswordHasher()


# ============================================================================
# Stores + historial
# ============================================================================


@pytest.fixture
def vehicle_repo(clock: FixedClock) -> InMemoryVehicleRepository:
    """R: Empty in-memory vehicle store."""
    return InMemoryVehicleRepository(clock=clock)


@pytest.fixture
def person_repo(clock: FixedClock) -> InMemoryPersonRepository:
    """R: Empty in-memory person store."""
    return InMemoryPersonRepository(clock=clock)


@pytest.fixture
def audit_repo() -> InMemoryAuditRecordRepository:
    """R: Empty in-memory historial store."""
    return InMemoryAuditRecordRepository()


@pytest.fixture
def historial(
    audit_repo: InMemoryAuditRecordRepository,
    clock: FixedClock,
    id_generator: SequentialIds,
) -> HistorialService:
    """R: HistorialService wired to the in-memory historial store."""
    return HistorialService(audit_repo, clock=clock, id_generator=id_generator)


class FailingAuditRepository(InMemoryAuditRecordRepository):
    """Historial store cuyo save siempre falla (auditoría best-effort)."""

    def __init__(self, fail_on: Callable[[Any], bool] = lambda record: True):
        super().__init__()
        self._fail_on = fail_on
        self.attempts = 0

    async def save(self, record):
        self.attempts += 1
        if self._fail_on(record):
            raise RuntimeError("historial storage is down")
        return await super().save(record)


@pytest.fixture
def failing_audit_repo() -> FailingAuditRepository:
    """R: Historial store that rejects every write."""
    return FailingAuditRepository()


@pytest.fixture
def failing_historial(
    failing_audit_repo: FailingAuditRepository,
    clock: FixedClock,
    id_generator: SequentialIds,
) -> HistorialService:
    """R: HistorialService whose writes always raise."""
    return HistorialService(failing_audit_repo, clock=clock, id_generator=id_generator)


# ============================================================================
# Data factories
# ============================================================================


def vehicle_data(**overrides: Any) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "name": "Toyota Corolla XEi",
        "plate": "AB123CD",
        "make": "Toyota",
        "model": "Corolla",
        "year": 2020,
        "price": 25000.0,
        "cost": 20000.0,
        "mileage": 35000,
    }
    data.update(overrides)
    return data


def person_data(**overrides: Any) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "name": "Ana",
        "surname": "García",
        "email": "ana@example.com",
        "password": "s3cretpass",
    }
    data.update(overrides)
    return data


@pytest.fixture
def make_vehicle(clock: FixedClock, id_generator: SequentialIds):
    """R: Factory for Vehicle entities (not persisted)."""

    def _make(**overrides: Any) -> Vehicle:
        return Vehicle.create(
            id=id_generator.new_id(),
            by="tester",
            at=clock.now(),
            **vehicle_data(**overrides),
        )

    return _make


@pytest.fixture
def make_person(clock: FixedClock, id_generator: SequentialIds):
    """R: Factory for Person entities (not persisted)."""

    def _make(**overrides: Any) -> Person:
        return Person.create(
            id=id_generator.new_id(),
            by="tester",
            at=clock.now(),
            **person_data(**overrides),
        )

    return _make


@pytest.fixture
def stored_vehicle(vehicle_repo: InMemoryVehicleRepository, make_vehicle):
    """R: Async factory that builds and saves a vehicle."""

    async def _stored(**overrides: Any) -> Vehicle:
        return await vehicle_repo.save(make_vehicle(**overrides))

    return _stored


@pytest.fixture
def vehicle_payload():
    """R: Factory for raw vehicle creation payloads."""
    return vehicle_data


@pytest.fixture
def person_payload():
    """R: Factory for raw person creation payloads."""
    return person_data


@pytest.fixture
def partially_failing_historial(clock: FixedClock, id_generator: SequentialIds):
    """R: Factory -> (HistorialService, store) failing only where fail_on() is true."""

    def _build(fail_on: Callable[[Any], bool]):
        repo = FailingAuditRepository(fail_on=fail_on)
        return HistorialService(repo, clock=clock, id_generator=id_generator), repo

    return _build
