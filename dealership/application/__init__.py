"""
===============================================================================
APPLICATION LAYER (Public API / Exports)
===============================================================================

Expone los servicios de aplicación compartidos:
  - HistorialService: recorder del historial (auditoría por entidad)
  - audit_best_effort / audit_all_best_effort: envoltorios que usan los
    workflows para que la auditoría nunca los haga fallar

Nota:
  - Los casos de uso se importan desde `usecases/` subdirectories.
===============================================================================
"""

from .historial_service import HistorialService, audit_all_best_effort, audit_best_effort

__all__ = ["HistorialService", "audit_best_effort", "audit_all_best_effort"]
