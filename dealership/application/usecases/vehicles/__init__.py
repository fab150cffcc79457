"""
===============================================================================
VEHICLE USE CASES PACKAGE (Public API / Exports)
===============================================================================

Punto único de importación para los workflows de vehículos y sus resultados.
===============================================================================
"""

from .change_vehicle_status import ChangeVehicleStatusUseCase
from .create_vehicle import CreateVehicleUseCase
from .delete_vehicle import DeleteVehicleUseCase, RestoreVehicleUseCase
from .list_vehicles import (
    ListAvailableMakesUseCase,
    ListFavoritesUseCase,
    ListVehiclesUseCase,
)
from .manage_favorite import ManageFavoriteUseCase
from .update_vehicle import UpdateVehicleUseCase
from .vehicle_results import FavoriteResult, StatusChangeResult, UpdateVehicleResult

__all__ = [
    "CreateVehicleUseCase",
    "UpdateVehicleUseCase",
    "ChangeVehicleStatusUseCase",
    "ManageFavoriteUseCase",
    "DeleteVehicleUseCase",
    "RestoreVehicleUseCase",
    "ListVehiclesUseCase",
    "ListFavoritesUseCase",
    "ListAvailableMakesUseCase",
    "UpdateVehicleResult",
    "StatusChangeResult",
    "FavoriteResult",
]
