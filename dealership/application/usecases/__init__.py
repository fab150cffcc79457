"""
Use Cases Layer (Business Operations)

Entry points for the back-office workflows, organized by feature.

Structure
---------
usecases/
├── vehicles/    # Alta, edición, estados, favoritos, baja/restauración
├── persons/     # Alta, edición, password, baja/restauración
└── historial/   # Línea de tiempo por entidad

Usage
-----
    from dealership.application.usecases.vehicles import ChangeVehicleStatusUseCase
"""
