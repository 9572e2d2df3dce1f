from __future__ import annotations

import logging
from typing import List

from core.errors import NotFound
from db import tempvoice as db
from .models import ChannelKind, ChannelRecord

logger = logging.getLogger(__name__)


class RecordStore:
    """Registre persistant des salons suivis (créateurs et temporaires).

    `lookup` et `list_by_group` lèvent `NotFound` sur absence ; les échecs base
    remontent en `StoreError`. Sûr en concurrence : chaque appel emprunte sa
    propre connexion au pool.
    """

    def __init__(self, pool):
        self.pool = pool

    async def lookup(self, channel_id: int) -> ChannelRecord:
        row = await db.fetch_channel(self.pool, channel_id)
        return ChannelRecord.from_row(row)

    async def insert(self, kind: ChannelKind, channel_id: int, guild_id: int) -> ChannelRecord:
        row = await db.insert_channel(self.pool, channel_id, ChannelKind(kind).value, guild_id)
        logger.debug("Salon %s enregistré (%s, guild %s)", channel_id, kind, guild_id)
        return ChannelRecord.from_row(row)

    async def remove(self, channel_id: int) -> bool:
        removed = await db.delete_channel(self.pool, channel_id) > 0
        if not removed:
            logger.debug("Salon %s déjà absent du registre", channel_id)
        return removed

    async def list_by_group(self, kind: ChannelKind, guild_id: int) -> List[ChannelRecord]:
        rows = await db.fetch_channels_for_guild(self.pool, ChannelKind(kind).value, guild_id)
        if not rows:
            raise NotFound(f"aucun salon {ChannelKind(kind).value} pour la guilde {guild_id}")
        return [ChannelRecord.from_row(r) for r in rows]


__all__ = ["RecordStore"]
