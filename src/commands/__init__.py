"""
Chargement des commandes slash du bot TempVoice.

Chaque module du package (hors `_*`) expose `register(bot)`, qui attache sa
commande racine à `bot.dispatcher`. Un module en erreur est journalisé et
n'empêche pas le chargement des autres.
"""
from __future__ import annotations

import importlib
import inspect
import logging
import pkgutil
from typing import List

logger = logging.getLogger(__name__)


def command_modules() -> List[str]:
	return sorted(
		f"{__name__}.{info.name}"
		for info in pkgutil.iter_modules(__path__)  # type: ignore[name-defined]
		if not info.name.startswith('_')
	)


async def load_all_commands(bot) -> int:
	"""Returns : nombre de modules enregistrés."""
	loaded = 0
	for full_name in command_modules():
		try:
			module = importlib.import_module(full_name)
			register = getattr(module, 'register', None)
			if register is None:
				logger.debug("Module %s sans register(), ignoré", full_name)
				continue
			result = register(bot)
			if inspect.isawaitable(result):
				await result
		except Exception:  # noqa: BLE001
			logger.exception("Echec chargement commande %s", full_name)
			continue
		loaded += 1
	logger.info("%s module(s) de commandes chargé(s): %s", loaded, ", ".join(bot.dispatcher.roots))
	return loaded

__all__ = ["load_all_commands", "command_modules"]
