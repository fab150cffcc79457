"""
HISTORIAL USE CASES PACKAGE (Public API / Exports)
"""

from .get_entity_history import EntityHistory, GetEntityHistoryUseCase, HistoryEntry

__all__ = ["GetEntityHistoryUseCase", "EntityHistory", "HistoryEntry"]
