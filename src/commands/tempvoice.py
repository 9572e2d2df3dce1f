"""
Groupe de commandes slash `/tempvoice creator` (create, position, list).

Permet la gestion des salons créateurs : rejoindre un salon créateur génère un salon vocal temporaire.
"""
from __future__ import annotations

import logging
from typing import List

from discord import app_commands

from core import config
from core.dispatch import CommandContext, CommandNode, MAX_CHOICES, Option, OptionType
from core.errors import CommandError, CommandValidationError, ExternalCallError, NotFound, StoreError
from core.permissions import require_perms, MANAGE_CHANNELS
from core.tempvoice.models import ChannelKind, ChannelSpec
from views import tempvoice as tempvoice_view

logger = logging.getLogger(__name__)

tempvoice = CommandNode("tempvoice", "Salons vocaux temporaires", default_permissions=MANAGE_CHANNELS)
creator = tempvoice.group("creator", "Gestion des salons créateurs")


def get_tempvoice(ctx: CommandContext):
    tv = getattr(ctx.interaction.client, "tempvoice", None)
    if tv is None:
        raise CommandError("TempVoice non initialisé (DB non configurée).")
    return tv


async def _creator_choices(tv, guild_id: int, current: str) -> List[app_commands.Choice[str]]:
    try:
        records = await tv.store.list_by_group(ChannelKind.CREATOR, guild_id)
    except NotFound:
        return []
    names = await tv.provisioner.channel_names(guild_id)
    current_lower = (current or '').lower()
    choices: List[app_commands.Choice[str]] = []
    for rec in records:
        name = names.get(rec.id)
        if name is None:
            logger.warning("Salon créateur %s enregistré mais absent de Discord", rec.id)
            continue
        if current_lower and current_lower not in name.lower():
            continue
        choices.append(app_commands.Choice(name=name[:100], value=str(rec.id)))
        if len(choices) >= MAX_CHOICES:
            break
    return choices


@creator.command("create", "Créer un salon créateur")
@require_perms(MANAGE_CHANNELS, message="Permission « Gérer les salons » requise.")
async def creator_create(ctx: CommandContext):
    tv = get_tempvoice(ctx)
    guild_id = ctx.guild_id
    spec = ChannelSpec(name=config.CREATOR_CHANNEL_NAME, reason=f"Salon créateur demandé par {ctx.interaction.user.id}")
    try:
        channel_id = await tv.provisioner.create(guild_id, spec)
    except ExternalCallError as exc:
        raise CommandError(tempvoice_view.msg_creator_create_failed(), exc) from exc
    try:
        await tv.store.insert(ChannelKind.CREATOR, channel_id, guild_id)
    except StoreError as exc:
        await tv.reconciler.compensate(channel_id, exc)
        raise CommandError(tempvoice_view.msg_creator_register_failed(), exc) from exc
    logger.info("Salon créateur %s créé (guild %s)", channel_id, guild_id)
    await ctx.text(tempvoice_view.msg_creator_created(channel_id))


@creator.command(
    "position",
    "Changer la position d'un salon créateur (place des salons temporaires)",
    options=(
        Option("channel", "Le salon créateur", required=True, autocomplete=True),
        Option("position", "Nouvelle position du salon créateur", type=OptionType.integer, required=True, min_value=0),
    ),
)
@require_perms(MANAGE_CHANNELS, message="Permission « Gérer les salons » requise.")
async def creator_position(ctx: CommandContext):
    tv = get_tempvoice(ctx)
    try:
        channel_id = int(ctx.option("channel"))
    except (TypeError, ValueError):
        raise CommandValidationError(tempvoice_view.msg_channel_invalide()) from None
    position = ctx.option("position")
    if not isinstance(position, int) or position < 0:
        raise CommandValidationError(tempvoice_view.msg_position_invalide())
    try:
        record = await tv.store.lookup(channel_id)
    except NotFound:
        raise CommandValidationError(tempvoice_view.msg_pas_un_createur()) from None
    if record.kind is not ChannelKind.CREATOR or record.guild_id != ctx.guild_id:
        raise CommandValidationError(tempvoice_view.msg_pas_un_createur())
    try:
        await tv.provisioner.edit(channel_id, position=position, reason="Repositionnement salon créateur")
    except ExternalCallError as exc:
        raise CommandError(tempvoice_view.msg_edit_failed(), exc) from exc
    await ctx.text(tempvoice_view.msg_position_updated(position))


@creator_position.autocomplete
async def creator_position_ac(ctx: CommandContext):
    focused, current = ctx.focused()
    if focused != "channel" or ctx.guild_id is None:
        await ctx.choices([])
        return
    tv = get_tempvoice(ctx)
    await ctx.choices(await _creator_choices(tv, ctx.guild_id, current))


@creator.command("list", "Lister les salons créateurs")
@require_perms(MANAGE_CHANNELS, message="Permission « Gérer les salons » requise.")
async def creator_list(ctx: CommandContext):
    tv = get_tempvoice(ctx)
    await ctx.defer()
    try:
        records = await tv.store.list_by_group(ChannelKind.CREATOR, ctx.guild_id)
    except NotFound:
        await ctx.text(tempvoice_view.msg_no_creator())
        return
    names = await tv.provisioner.channel_names(ctx.guild_id)
    await ctx.text("\n".join(tempvoice_view.fmt_creator_line(r.id, names.get(r.id)) for r in records))


def register(bot):
    bot.dispatcher.add(tempvoice)

__all__ = ["register"]
