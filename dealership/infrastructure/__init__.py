"""
===============================================================================
INFRASTRUCTURE LAYER
===============================================================================

Adaptadores concretos de los puertos del dominio:
  - repositories/in_memory: stores en memoria (tests / desarrollo local)
  - repositories/postgres:  stores async sobre psycopg 3
  - db:                     pool async de conexiones
  - services:               reloj, ids, hashing de passwords
===============================================================================
"""
