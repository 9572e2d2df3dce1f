"""
Commandes slash d'administration `/mod`.

Commandes disponibles :
- /mod group create <name> : crée un groupe rattaché à la guilde
- /mod group list : liste les groupes de la guilde avec le nom de leur guilde
"""
from __future__ import annotations

import logging
import re

from core.dispatch import CommandContext, CommandNode, Option
from core.errors import CommandError, CommandValidationError, DuplicateRecord
from core.permissions import require_perms, ADMINISTRATOR
from core.tempvoice.provisioner import ResourceProvisioner
from db import groups as db_groups
from views import groups as groups_view

logger = logging.getLogger(__name__)

GROUP_NAME_RE = re.compile(r"[A-Za-z0-9 _-]+")

mod = CommandNode("mod", "Administration", default_permissions=ADMINISTRATOR)
group = mod.group("group", "Gestion des groupes")


def get_pool(ctx: CommandContext):
    pool = getattr(ctx.interaction.client, 'db_pool', None)
    if pool is None:
        raise CommandError("DB non configurée.")
    return pool


def validate_group_name(raw) -> str:
    if not isinstance(raw, str) or GROUP_NAME_RE.fullmatch(raw) is None:
        raise CommandValidationError(groups_view.msg_nom_invalide())
    name = raw.strip()
    if not name:
        raise CommandValidationError(groups_view.msg_nom_invalide())
    return name


@group.command("create", "Créer un groupe", options=(Option("name", "Nom du groupe", required=True, max_length=100),))
@require_perms(ADMINISTRATOR, message="Admin requis (bit 8)")
async def group_create(ctx: CommandContext):
    name = validate_group_name(ctx.option("name"))
    pool = get_pool(ctx)
    try:
        created = await db_groups.create_group(pool, name, ctx.guild_id)
    except DuplicateRecord:
        raise CommandValidationError(groups_view.msg_group_exists(name)) from None
    logger.info("Groupe %s (%s) créé pour la guilde %s", created.name, created.id, created.guild_id)
    await ctx.text(groups_view.msg_group_created(created.name))


@group.command("list", "Lister les groupes de ce serveur")
@require_perms(ADMINISTRATOR, message="Admin requis (bit 8)")
async def group_list(ctx: CommandContext):
    pool = get_pool(ctx)
    await ctx.defer()
    groups = await db_groups.fetch_groups(pool, ctx.guild_id)
    if not groups:
        await ctx.text(groups_view.msg_no_group())
        return
    provisioner = ResourceProvisioner(ctx.interaction.client)
    guild_names = {}
    for g in groups:
        if g.guild_id not in guild_names:
            guild_names[g.guild_id] = await provisioner.guild_name(g.guild_id)
    await ctx.text(groups_view.fmt_group_lines(groups, guild_names))


def register(bot):
    bot.dispatcher.add(mod)

__all__ = ["register"]
