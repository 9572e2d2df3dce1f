"""
Utilitaires pour la vérification des permissions Discord via bitmask.

Rappel :
- `discord.Permissions` expose un attribut `.value` (int) contenant les bits cumulés
- On teste un sous-ensemble via : (current & required) == required

Exemple : Administrator = 0x00000008, Manage Channels = 0x00000010

Ce module fournit le décorateur `require_perms` pour les handlers du dispatcher.
"""
from __future__ import annotations

from typing import Callable, TypeVar, Awaitable, Any
import functools

from core.errors import CommandValidationError

T = TypeVar("T", bound=Callable[..., Awaitable[Any]])

# Extraits de `discord.Permissions` (compléter si besoin futur)
ADMINISTRATOR = 0x00000008
MANAGE_CHANNELS = 0x00000010


def require_perms(bits: int, *, message: str | None = None):
    """
    Décorateur pour vérifier que l'auteur d'une commande possède toutes les permissions spécifiées (bitmask).

    Args :
        bits : Masque de bits des permissions requises (ex : ADMINISTRATOR = 8)
        message : Message d'erreur personnalisé (optionnel)

    Fonctionnement :
    - Récupère le bitfield complet via `ctx.interaction.user.guild_permissions.value`
    - Vérifie que tous les bits demandés sont présents
    - Si échec : lève `CommandValidationError`, le dispatcher répond avec le message public

    Note :
    - Hors guilde (DM), l'accès est refusé
    - Un administrateur possède implicitement tous les bits
    """
    def decorator(func: T) -> T:
        @functools.wraps(func)
        async def wrapper(ctx, *args, **kwargs):  # type: ignore[misc]
            interaction = ctx.interaction
            if interaction.guild is None:
                raise CommandValidationError(message or "Commande uniquement disponible dans une guilde.")
            perms_value = interaction.user.guild_permissions.value  # type: ignore[union-attr]
            if (perms_value & bits) != bits:
                raise CommandValidationError(message or f"Permissions insuffisantes (requis bitmask: {bits}).")
            return await func(ctx, *args, **kwargs)
        wrapper.required_permissions = bits  # type: ignore[attr-defined]
        return wrapper  # type: ignore[return-value]
    return decorator

__all__ = ["require_perms", "ADMINISTRATOR", "MANAGE_CHANNELS"]
