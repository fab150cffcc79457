"""
===============================================================================
DEALERSHIP BACK-OFFICE CORE
===============================================================================

Paquete raíz del core de back-office de la concesionaria:
  - domain/          entidades, máquina de estados, detector de cambios, puertos
  - application/     historial (auditoría) + casos de uso
  - infrastructure/  stores in-memory / PostgreSQL, reloj, ids, hashing
  - crosscutting/    config, logging, errores base, paginación
===============================================================================
"""
