"""
Hiérarchie d'exceptions du bot TempVoice.

Principes :
- `NotFound` est un signal de contrôle (ligne absente), jamais un échec
- `StoreError` couvre les échecs de lecture/écriture en base
- `ExternalCallError` enveloppe tout échec d'appel à l'API Discord avec son contexte
- `CompensationFailure` n'est jamais levée : elle est construite puis journalisée
- `CommandError` porte un message destiné à l'utilisateur
"""
from __future__ import annotations

from typing import Optional, Sequence

import discord


class TempVoiceError(Exception):
    """Base commune des erreurs applicatives."""


class NotFound(TempVoiceError):
    pass


class StoreError(TempVoiceError):
    pass


class DuplicateRecord(StoreError):
    pass


class ExternalCallError(TempVoiceError):
    """Echec d'un appel Discord, enrichi de l'opération et de la ressource visée."""

    def __init__(self, operation: str, resource_id: Optional[int], cause: BaseException):
        self.operation = operation
        self.resource_id = resource_id
        self.cause = cause
        target = f" ({resource_id})" if resource_id is not None else ""
        super().__init__(f"{operation}{target}: {cause}")

    @property
    def gone(self) -> bool:
        return isinstance(self.cause, discord.NotFound)


class CompensationFailure(TempVoiceError):
    """Echec de l'annulation d'une création partielle (ressource orpheline)."""

    def __init__(self, resource_id: int, cause: BaseException, error: BaseException):
        self.resource_id = resource_id
        self.cause = cause
        self.error = error
        super().__init__(f"annulation du salon {resource_id} impossible ({error}) après: {cause}")


class CommandError(TempVoiceError):
    """Erreur de commande avec message public."""

    def __init__(self, public_message: str, cause: Optional[BaseException] = None):
        self.public_message = public_message
        self.cause = cause
        super().__init__(f"{public_message}: {cause}" if cause is not None else public_message)

    def with_cause(self, cause: BaseException) -> "CommandError":
        return type(self)(self.public_message, cause)


class CommandValidationError(CommandError):
    pass


class NoHandler(TempVoiceError):
    def __init__(self, path: Sequence[str]):
        self.path = tuple(path)
        super().__init__("aucun handler pour /" + " ".join(p for p in self.path if p))


__all__ = [
    "TempVoiceError", "NotFound", "StoreError", "DuplicateRecord", "ExternalCallError",
    "CompensationFailure", "CommandError", "CommandValidationError", "NoHandler",
]
