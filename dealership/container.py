"""
===============================================================================
TARJETA CRC — dealership/container.py (Composition Root / DI manual)
===============================================================================

Responsabilidades:
  - Componer dependencias (stores, recorder, reloj, ids, hashing) siguiendo DIP.
  - Exponer factories de casos de uso para la capa de transporte externa.
  - Mantener singletons con caching (lru_cache) para stores y servicios.
  - Elegir in-memory vs PostgreSQL según Settings (DATABASE_URL).

Colaboradores:
  - crosscutting.config.get_settings
  - domain.repositories.* / domain.services.* (puertos)
  - infrastructure.* (implementaciones)
  - application.usecases.* (casos de uso)

Notas:
  - Este archivo NO contiene lógica de negocio.
  - Los casos de uso reciben todo por constructor: no hay registro global
    que consulten por su cuenta.
===============================================================================
"""

from __future__ import annotations

from functools import lru_cache

from .application.historial_service import HistorialService
from .application.usecases.historial import GetEntityHistoryUseCase
from .application.usecases.persons import (
    ChangePasswordUseCase,
    CreatePersonUseCase,
    DeletePersonUseCase,
    ListPersonsUseCase,
    RestorePersonUseCase,
    UpdatePersonUseCase,
)
from .application.usecases.vehicles import (
    ChangeVehicleStatusUseCase,
    CreateVehicleUseCase,
    DeleteVehicleUseCase,
    ListAvailableMakesUseCase,
    ListFavoritesUseCase,
    ListVehiclesUseCase,
    ManageFavoriteUseCase,
    RestoreVehicleUseCase,
    UpdateVehicleUseCase,
)
from .crosscutting.config import get_settings
from .crosscutting.logger import logger
from .domain.repositories import (
    AuditRecordRepository,
    PersonRepository,
    VehicleRepository,
)
from .domain.services import Clock, IdGenerator, PasswordHasher
from .infrastructure.repositories.in_memory import (
    InMemoryAuditRecordRepository,
    InMemoryPersonRepository,
    InMemoryVehicleRepository,
)
from .infrastructure.repositories.postgres import (
    PostgresAuditRecordRepository,
    PostgresPersonRepository,
    PostgresVehicleRepository,
)
from .infrastructure.services import Argon2PasswordHasher, SystemClock, UuidGenerator

# =============================================================================
# Servicios base (singletons)
# =============================================================================


@lru_cache(maxsize=1)
def get_clock() -> Clock:
    return SystemClock()


@lru_cache(maxsize=1)
def get_id_generator() -> IdGenerator:
    return UuidGenerator()


@lru_cache(maxsize=1)
def get_password_hasher() -> PasswordHasher:
    return Argon2PasswordHasher()


# =============================================================================
# Repositorios (singletons)
# =============================================================================


def _uses_database() -> bool:
    """DATABASE_URL vacío => stores in-memory (tests / desarrollo local)."""
    return get_settings().uses_database()


@lru_cache(maxsize=1)
def get_vehicle_repository() -> VehicleRepository:
    if _uses_database():
        return PostgresVehicleRepository()
    return InMemoryVehicleRepository(clock=get_clock())


@lru_cache(maxsize=1)
def get_person_repository() -> PersonRepository:
    if _uses_database():
        return PostgresPersonRepository()
    return InMemoryPersonRepository(clock=get_clock())


@lru_cache(maxsize=1)
def get_audit_record_repository() -> AuditRecordRepository:
    if _uses_database():
        return PostgresAuditRecordRepository()
    return InMemoryAuditRecordRepository()


@lru_cache(maxsize=1)
def get_historial_service() -> HistorialService:
    return HistorialService(
        get_audit_record_repository(),
        clock=get_clock(),
        id_generator=get_id_generator(),
    )


# =============================================================================
# Casos de uso: vehículos
# =============================================================================


def get_create_vehicle_use_case() -> CreateVehicleUseCase:
    return CreateVehicleUseCase(
        get_vehicle_repository(),
        get_historial_service(),
        clock=get_clock(),
        id_generator=get_id_generator(),
    )


def get_update_vehicle_use_case() -> UpdateVehicleUseCase:
    return UpdateVehicleUseCase(
        get_vehicle_repository(), get_historial_service(), clock=get_clock()
    )


def get_change_vehicle_status_use_case() -> ChangeVehicleStatusUseCase:
    return ChangeVehicleStatusUseCase(
        get_vehicle_repository(), get_historial_service(), clock=get_clock()
    )


def get_manage_favorite_use_case() -> ManageFavoriteUseCase:
    return ManageFavoriteUseCase(
        get_vehicle_repository(),
        get_historial_service(),
        clock=get_clock(),
        max_slots=get_settings().max_favorite_slots,
    )


def get_delete_vehicle_use_case() -> DeleteVehicleUseCase:
    return DeleteVehicleUseCase(get_vehicle_repository(), get_historial_service())


def get_restore_vehicle_use_case() -> RestoreVehicleUseCase:
    return RestoreVehicleUseCase(get_vehicle_repository(), get_historial_service())


def get_list_vehicles_use_case() -> ListVehiclesUseCase:
    return ListVehiclesUseCase(
        get_vehicle_repository(), max_page_size=get_settings().max_page_size
    )


def get_list_favorites_use_case() -> ListFavoritesUseCase:
    return ListFavoritesUseCase(get_vehicle_repository())


def get_list_available_makes_use_case() -> ListAvailableMakesUseCase:
    return ListAvailableMakesUseCase(get_vehicle_repository())


# =============================================================================
# Casos de uso: personas
# =============================================================================


def get_create_person_use_case() -> CreatePersonUseCase:
    return CreatePersonUseCase(
        get_person_repository(),
        get_historial_service(),
        clock=get_clock(),
        id_generator=get_id_generator(),
        password_hasher=get_password_hasher(),
    )


def get_update_person_use_case() -> UpdatePersonUseCase:
    return UpdatePersonUseCase(
        get_person_repository(),
        get_historial_service(),
        clock=get_clock(),
        password_hasher=get_password_hasher(),
    )


def get_change_password_use_case() -> ChangePasswordUseCase:
    return ChangePasswordUseCase(
        get_person_repository(),
        get_historial_service(),
        clock=get_clock(),
        password_hasher=get_password_hasher(),
    )


def get_delete_person_use_case() -> DeletePersonUseCase:
    return DeletePersonUseCase(get_person_repository(), get_historial_service())


def get_restore_person_use_case() -> RestorePersonUseCase:
    return RestorePersonUseCase(get_person_repository(), get_historial_service())


def get_list_persons_use_case() -> ListPersonsUseCase:
    return ListPersonsUseCase(
        get_person_repository(), max_page_size=get_settings().max_page_size
    )


# =============================================================================
# Casos de uso: historial
# =============================================================================


def get_entity_history_use_case() -> GetEntityHistoryUseCase:
    return GetEntityHistoryUseCase(get_historial_service())


# =============================================================================
# Recursos (pool DB)
# =============================================================================


async def init_resources() -> None:
    """Abre el pool si hay DATABASE_URL; no-op con stores in-memory."""
    settings = get_settings()
    if not settings.uses_database():
        logger.info("Sin DATABASE_URL: usando stores in-memory")
        return

    from .infrastructure.db.pool import init_pool

    await init_pool(
        settings.database_url, settings.db_pool_min_size, settings.db_pool_max_size
    )


async def close_resources() -> None:
    from .infrastructure.db.pool import close_pool

    await close_pool()


def reset_container() -> None:
    """Limpia los singletons cacheados (tests)."""
    for factory in (
        get_clock,
        get_id_generator,
        get_password_hasher,
        get_vehicle_repository,
        get_person_repository,
        get_audit_record_repository,
        get_historial_service,
    ):
        factory.cache_clear()
