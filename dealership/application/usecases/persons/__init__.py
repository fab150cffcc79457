"""
PERSON USE CASES PACKAGE (Public API / Exports)
"""

from .create_person import CreatePersonUseCase
from .delete_person import DeletePersonUseCase, RestorePersonUseCase
from .list_persons import ListPersonsUseCase
from .update_person import ChangePasswordUseCase, UpdatePersonResult, UpdatePersonUseCase

__all__ = [
    "CreatePersonUseCase",
    "UpdatePersonUseCase",
    "UpdatePersonResult",
    "ChangePasswordUseCase",
    "DeletePersonUseCase",
    "RestorePersonUseCase",
    "ListPersonsUseCase",
]
