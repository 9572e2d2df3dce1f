"""
Entrée principale du bot TempVoice.

Ce script garantit que le dossier courant est ajouté à sys.path pour permettre les imports absolus
(core, commands, etc.), même si le lancement se fait via `python src/run.py`.
"""
from __future__ import annotations

import sys
import os

 # Ajoute dynamiquement le répertoire courant à sys.path si nécessaire
_CURRENT_DIR = os.path.dirname(__file__)
if _CURRENT_DIR not in sys.path:
    sys.path.insert(0, _CURRENT_DIR)

from core.logging_config import setup_logging  # noqa: E402
setup_logging()  # Initialise le logging global

from core import config, bot as bot_module  # noqa: E402


def main() -> None:
    # Vérifie la présence du token Discord
    if not config.BOT_TOKEN:
        raise SystemExit("BOT_TOKEN manquant")
    bot = bot_module.Bot(command_guild_id=config.COMMAND_GUILD_ID, delete_commands=config.DELETE_COMMANDS)
    try:
        # Le logging racine est déjà configuré : pas de handler discord.py dédié
        bot.run(config.BOT_TOKEN, log_handler=None)
    except KeyboardInterrupt:
        print("Arrêt manuel")
        sys.exit(0)


# Démarre le bot si le script est exécuté directement
if __name__ == "__main__":
    main()
