"""
Exceptions métier de l'API des agences
Chaque erreur porte un type (ErrorKind) que la couche HTTP traduit en statut
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Catégories d'erreurs remontées par le service"""
    INVALID_ARGUMENT = "invalid_argument"
    NOT_FOUND = "not_found"
    STORAGE_FAILURE = "storage_failure"


class AgenciaError(Exception):
    """Erreur de base du domaine agences"""

    kind: ErrorKind = ErrorKind.STORAGE_FAILURE

    def __init__(self, message: str, kind: Optional[ErrorKind] = None):
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind


class InvalidArgumentError(AgenciaError):
    """Paramètre absent ou règle d'espacement violée"""
    kind = ErrorKind.INVALID_ARGUMENT


class NotFoundError(AgenciaError):
    """Aucune agence pour l'identifiant demandé"""
    kind = ErrorKind.NOT_FOUND


class StorageFailureError(AgenciaError):
    """Échec de la base ou erreur inattendue (cause conservée dans __cause__)"""
    kind = ErrorKind.STORAGE_FAILURE


__all__ = [
    "ErrorKind",
    "AgenciaError",
    "InvalidArgumentError",
    "NotFoundError",
    "StorageFailureError",
]
