from __future__ import annotations

import logging
from dataclasses import dataclass

import discord

from core.errors import StoreError
from db import tempvoice as db
from .models import PresenceEvent
from .provisioner import ResourceProvisioner
from .reconciler import LifecycleReconciler
from .router import PresenceEventRouter
from .store import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class TempVoice:
    store: RecordStore
    provisioner: ResourceProvisioner
    reconciler: LifecycleReconciler
    router: PresenceEventRouter

    async def handle_voice_state_update(self, member: discord.Member, before: discord.VoiceState, after: discord.VoiceState):
        await self.router.route(PresenceEvent.from_voice_states(member, before, after))

    async def handle_channel_delete(self, channel: discord.abc.GuildChannel):
        # Salon suivi supprimé à la main : purge de l'enregistrement
        try:
            if await self.store.remove(channel.id):
                logger.info("Salon suivi %s supprimé manuellement -> purgé du registre", channel.id)
        except StoreError:
            logger.exception("Echec purge registre pour le salon supprimé %s", channel.id)


async def setup_tempvoice(bot, pool) -> TempVoice:
    await db.ensure_schema(pool)
    store = RecordStore(pool)
    provisioner = ResourceProvisioner(bot)
    reconciler = LifecycleReconciler(store, provisioner)
    runtime = TempVoice(store=store, provisioner=provisioner, reconciler=reconciler, router=PresenceEventRouter(reconciler))

    @bot.event
    async def on_voice_state_update(member: discord.Member, before: discord.VoiceState, after: discord.VoiceState):  # type: ignore
        await runtime.handle_voice_state_update(member, before, after)

    @bot.event
    async def on_guild_channel_delete(channel: discord.abc.GuildChannel):  # type: ignore
        await runtime.handle_channel_delete(channel)

    bot.tempvoice = runtime  # type: ignore
    return runtime


__all__ = ["TempVoice", "setup_tempvoice"]
