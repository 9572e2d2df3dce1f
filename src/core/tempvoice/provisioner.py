from __future__ import annotations

import logging
from typing import Dict

import discord

from core.errors import ExternalCallError
from .models import ChannelAttributes, ChannelSpec

logger = logging.getLogger(__name__)


class ResourceProvisioner:
    """Enveloppe fine des appels Discord (création, suppression, édition, déplacement).

    Aucun cache propre, aucune relance : chaque `discord.HTTPException` remonte
    en `ExternalCallError` avec l'opération et l'identifiant visé. Les lectures
    passent d'abord par le cache du client gateway (état temps réel) puis par
    l'API REST si l'objet n'y est pas.
    """

    def __init__(self, bot: discord.Client):
        self.bot = bot

    # ---------- lectures ----------
    async def _channel(self, channel_id: int, operation: str):
        channel = self.bot.get_channel(channel_id)
        if channel is not None:
            return channel
        try:
            return await self.bot.fetch_channel(channel_id)
        except discord.HTTPException as exc:
            raise ExternalCallError(operation, channel_id, exc) from exc

    async def _guild(self, guild_id: int, operation: str) -> discord.Guild:
        guild = self.bot.get_guild(guild_id)
        if guild is not None:
            return guild
        try:
            return await self.bot.fetch_guild(guild_id)
        except discord.HTTPException as exc:
            raise ExternalCallError(operation, guild_id, exc) from exc

    async def read_attributes(self, channel_id: int) -> ChannelAttributes:
        channel = await self._channel(channel_id, "lecture salon")
        return ChannelAttributes(
            user_limit=getattr(channel, "user_limit", 0) or 0,
            position=channel.position,
            category_id=getattr(channel, "category_id", None),
        )

    def occupancy(self, channel_id: int) -> int:
        # Etat vocal temps réel du gateway ; un salon absent du cache est vide
        channel = self.bot.get_channel(channel_id)
        if not isinstance(channel, (discord.VoiceChannel, discord.StageChannel)):
            return 0
        return len(channel.voice_states)

    async def guild_name(self, guild_id: int) -> str:
        guild = await self._guild(guild_id, "lecture guilde")
        return guild.name

    async def channel_names(self, guild_id: int) -> Dict[int, str]:
        guild = self.bot.get_guild(guild_id)
        if guild is not None:
            return {ch.id: ch.name for ch in guild.channels}
        guild = await self._guild(guild_id, "lecture salons")
        try:
            channels = await guild.fetch_channels()
        except discord.HTTPException as exc:
            raise ExternalCallError("lecture salons", guild_id, exc) from exc
        return {ch.id: ch.name for ch in channels}

    # ---------- écritures ----------
    async def create(self, guild_id: int, spec: ChannelSpec) -> int:
        guild = await self._guild(guild_id, "création salon")
        options = {"user_limit": spec.user_limit, "reason": spec.reason}
        if spec.position is not None:
            options["position"] = spec.position
        if spec.category_id is not None:
            options["category"] = discord.Object(id=spec.category_id)
        try:
            channel = await guild.create_voice_channel(spec.name, **options)
        except discord.HTTPException as exc:
            raise ExternalCallError("création salon", guild_id, exc) from exc
        logger.debug("Salon vocal %s créé (%s) dans la guilde %s", channel.id, spec.name, guild_id)
        return channel.id

    async def delete(self, channel_id: int, reason: str | None = None) -> bool:
        """
        Supprime un salon. Returns : False si le salon n'existait déjà plus.

        Un salon déjà supprimé (suppressions concurrentes) n'est pas une erreur.
        """
        try:
            channel = await self._channel(channel_id, "suppression salon")
            await channel.delete(reason=reason)
        except ExternalCallError as exc:
            if exc.gone:
                logger.info("Salon %s déjà supprimé", channel_id)
                return False
            raise
        except discord.NotFound:
            logger.info("Salon %s déjà supprimé", channel_id)
            return False
        except discord.HTTPException as exc:
            raise ExternalCallError("suppression salon", channel_id, exc) from exc
        return True

    async def move(self, guild_id: int, user_id: int, channel_id: int, reason: str | None = None) -> None:
        guild = await self._guild(guild_id, "déplacement membre")
        try:
            member = guild.get_member(user_id) or await guild.fetch_member(user_id)
            await member.move_to(discord.Object(id=channel_id), reason=reason)
        except discord.HTTPException as exc:
            raise ExternalCallError("déplacement membre", channel_id, exc) from exc

    async def edit(self, channel_id: int, reason: str | None = None, **changes) -> None:
        channel = await self._channel(channel_id, "édition salon")
        try:
            await channel.edit(reason=reason, **changes)
        except discord.HTTPException as exc:
            raise ExternalCallError("édition salon", channel_id, exc) from exc


__all__ = ["ResourceProvisioner"]
