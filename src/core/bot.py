"""
Classe principale du bot TempVoice.

Responsabilités :
- Crée le client Discord et le dispatcher de commandes slash.
- Initialise la base de données (pool + schémas) si configurée.
- Met en place le moteur TempVoice (registre, provisioner, réconciliation, routage vocal).
- Déclare le schéma des commandes auprès de Discord (guilde ou global) et le retire à l'arrêt si demandé.

Note : L'initialisation asynchrone est centralisée dans `setup_hook`, appelé après le login et avant `on_ready`.
"""
from __future__ import annotations

import logging
import discord

from core import config, db
from core.dispatch import CommandDispatcher

logger = logging.getLogger(__name__)

class Bot(discord.Client):
    """
    Client Discord étendu, encapsulant l'état applicatif.

    Attributs principaux :
        dispatcher : Arbre de routage des commandes slash
        db_pool : Pool asyncpg (None si aucune DB configurée)
        tempvoice : Runtime TempVoice (absent si aucune DB configurée)
    """


    def __init__(self, *, command_guild_id: int | None = None, delete_commands: bool = False):
        super().__init__(intents=config.INTENTS)
        self.dispatcher = CommandDispatcher()
        self.db_pool = None  # Sera peuplé si DATABASE_URL défini
        self.command_guild_id = command_guild_id
        self.delete_commands = delete_commands

    async def setup_hook(self):
        """
        Initialise les sous-systèmes avant la mise en ligne.

        Séquence :
        1. Connexion et migration DB (si configurée)
        2. Chargement du moteur TempVoice (dépend de la DB)
        3. Chargement des commandes et déclaration du schéma
        """
        try:
            if config.DATABASE_URL:
                self.db_pool = await db.get_pool(config.DATABASE_URL)
                from db import groups as groups_db  # import local pour éviter cycles
                await groups_db.ensure_schema(self.db_pool)
                logger.info("DB prête")
            else:
                logger.error("DATABASE_URL manquant : TempVoice désactivé")
        except Exception:  # noqa: BLE001
            logger.exception("Erreur init DB")
        if self.db_pool is not None:
            try:
                from core.tempvoice import setup_tempvoice  # type: ignore
                await setup_tempvoice(self, self.db_pool)
                logger.info("TempVoice initialisé")
            except Exception:  # noqa: BLE001
                logger.exception("Erreur init TempVoice")
        try:
            from commands import load_all_commands  # type: ignore
            await load_all_commands(self)
        except Exception:  # noqa: BLE001
            logger.exception("Erreur chargement commandes dynamiques")
        try:
            await self.sync_commands()
        except Exception:  # noqa: BLE001
            logger.exception("Erreur sync slash commands")

    async def sync_commands(self, payload: list | None = None):
        """
        Remplace en bloc le schéma des commandes (liste vide = suppression de toutes les commandes).
        """
        payload = self.dispatcher.payload() if payload is None else payload
        # HTTPClient.bulk_upsert_*_commands : interne à discord.py, signature stable sur 2.x (pin <3 dans pyproject)
        if self.command_guild_id:
            await self.http.bulk_upsert_guild_commands(self.application_id, self.command_guild_id, payload)
            logger.info("Slash commands synchronisées sur la guilde %s (%s)", self.command_guild_id, len(payload))
        else:
            await self.http.bulk_upsert_global_commands(self.application_id, payload)
            logger.info("Slash commands synchronisées globalement (%s)", len(payload))

    async def on_interaction(self, interaction: discord.Interaction):
        await self.dispatcher.dispatch(interaction)

    async def on_ready(self):
        logger.info("Connecté: %s (%s)", self.user, getattr(self.user, 'id', '?'))

    async def close(self):  # type: ignore[override]
        """
        Fermeture propre du bot.
        Retire le schéma des commandes si DELETE_COMMANDS, puis ferme le pool asyncpg.
        """
        if self.delete_commands and self.application_id is not None:
            try:
                await self.sync_commands([])
                logger.info("Slash commands supprimées")
            except Exception:  # noqa: BLE001
                logger.exception("Erreur suppression slash commands")
        try:
            if self.db_pool is not None:
                await db.close_pool()
                self.db_pool = None
        except Exception:  # noqa: BLE001
            logger.exception("Erreur fermeture pool")
        await super().close()
