from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Mapping, Optional

# Limite Discord sur la longueur d'un nom de salon
CHANNEL_NAME_MAX = 100


class ChannelKind(str, enum.Enum):
    CREATOR = "creator"
    TEMPORARY = "temporary"


@dataclass(frozen=True)
class ChannelRecord:
    """Ligne du registre : un salon suivi par le bot.

    kind:
        creator   -> salon permanent créé par un admin, génère des salons temporaires
        temporary -> salon éphémère, supprimé quand il se vide
    """

    id: int
    kind: ChannelKind
    guild_id: int

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "ChannelRecord":
        return cls(id=int(row["id"]), kind=ChannelKind(row["kind"]), guild_id=int(row["guild_id"]))


@dataclass(frozen=True)
class Group:
    id: int
    name: str
    guild_id: int

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Group":
        return cls(id=int(row["id"]), name=row["name"], guild_id=int(row["guild_id"]))


@dataclass(frozen=True)
class ChannelAttributes:
    user_limit: int
    position: int
    category_id: Optional[int] = None


@dataclass(frozen=True)
class ChannelSpec:
    name: str
    user_limit: int = 0
    position: Optional[int] = None
    category_id: Optional[int] = None
    reason: Optional[str] = None

    @classmethod
    def cloned_from(cls, attrs: ChannelAttributes, name: str, *, reason: Optional[str] = None) -> "ChannelSpec":
        # Le salon temporaire se place juste sous son salon créateur
        return cls(
            name=(name or "Salon")[:CHANNEL_NAME_MAX],
            user_limit=attrs.user_limit,
            position=attrs.position + 1,
            category_id=attrs.category_id,
            reason=reason,
        )


@dataclass(frozen=True)
class PresenceEvent:
    user_id: int
    user_name: str
    guild_id: int
    before_channel_id: Optional[int] = None
    after_channel_id: Optional[int] = None

    @classmethod
    def from_voice_states(cls, member, before, after) -> "PresenceEvent":
        """Construit l'événement depuis les arguments de `on_voice_state_update`."""
        return cls(
            user_id=member.id,
            user_name=member.display_name,
            guild_id=member.guild.id,
            before_channel_id=before.channel.id if before.channel is not None else None,
            after_channel_id=after.channel.id if after.channel is not None else None,
        )


__all__ = ["ChannelKind", "ChannelRecord", "Group", "ChannelAttributes", "ChannelSpec", "PresenceEvent", "CHANNEL_NAME_MAX"]
