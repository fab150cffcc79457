"""
Crosscutting: config (pydantic-settings), logger JSON, errores base y paginación.

Nota: no se re-exporta nada acá para que importar `exceptions` no dispare
la lectura de Settings ni la creación del logger.
"""
