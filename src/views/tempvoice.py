"""
Textes et helpers pour les commandes `/tempvoice` (salons créateurs).
"""
from __future__ import annotations

def fmt_creator_line(channel_id: int, name: str | None) -> str:
    return f"`{channel_id}` {name if name else '(introuvable)'}"

def msg_no_creator() -> str: return "Aucun salon créateur."
def msg_creator_created(cid: int) -> str: return f"Salon créateur `{cid}` créé, vous pouvez le déplacer !"
def msg_creator_create_failed() -> str: return "Impossible de créer le salon."
def msg_creator_register_failed() -> str: return "Salon créé mais non enregistré, création annulée."
def msg_channel_invalide() -> str: return "Channel invalide."
def msg_pas_un_createur() -> str: return "Pas un salon créateur."
def msg_position_invalide() -> str: return "Position invalide (>= 0)."
def msg_edit_failed() -> str: return "Impossible de modifier le salon."
def msg_position_updated(position: int) -> str: return f"Salon déplacé en position {position}."

__all__ = [name for name in globals().keys() if name.startswith('msg_') or name.startswith('fmt_')]
