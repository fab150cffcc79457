"""
Repository implementations: in_memory/ (tests, desarrollo) y postgres/ (producción).
"""
