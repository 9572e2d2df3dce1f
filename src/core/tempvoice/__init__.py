"""TempVoice core package.

Les imports sont effectués de manière lazy pour éviter d'exécuter du code
pendant l'initialisation globale si non nécessaire.
"""
from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # aide mypy/IDE sans exécuter les imports au runtime initial
	from .reconciler import LifecycleReconciler  # noqa: F401
	from .router import PresenceEventRouter  # noqa: F401
	from .runtime import TempVoice, setup_tempvoice  # noqa: F401

__all__ = ["LifecycleReconciler", "PresenceEventRouter", "TempVoice", "setup_tempvoice"]

_LAZY = {
	"LifecycleReconciler": "core.tempvoice.reconciler",
	"PresenceEventRouter": "core.tempvoice.router",
	"TempVoice": "core.tempvoice.runtime",
	"setup_tempvoice": "core.tempvoice.runtime",
}


def __getattr__(name: str):  # lazy resolution
	if name in _LAZY:
		return getattr(import_module(_LAZY[name]), name)
	raise AttributeError(name)
