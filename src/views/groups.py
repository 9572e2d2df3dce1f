"""
Textes et helpers pour les commandes `/mod group`.
"""
from __future__ import annotations

from typing import Iterable, Mapping

from core.tempvoice.models import Group

def fmt_group_lines(groups: Iterable[Group], guild_names: Mapping[int, str]) -> str:
    return "\n".join(
        f"{i}. `{g.name}` ({guild_names.get(g.guild_id, g.guild_id)})" for i, g in enumerate(groups, start=1)
    )

def msg_no_group() -> str: return "Aucun groupe."
def msg_group_created(name: str) -> str: return f"Groupe `{name}` créé."
def msg_group_exists(name: str) -> str: return f"Le groupe `{name}` existe déjà."
def msg_nom_invalide() -> str:
    return "Nom de groupe invalide : seuls A-Z, a-z, 0-9, espace, tiret et underscore sont autorisés."

__all__ = [name for name in globals().keys() if name.startswith('msg_') or name.startswith('fmt_')]
