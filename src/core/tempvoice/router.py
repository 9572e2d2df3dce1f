from __future__ import annotations

import asyncio
import enum
import logging
from typing import Awaitable, Callable, Dict, Tuple

from core.errors import ExternalCallError, StoreError
from .models import PresenceEvent
from .reconciler import LifecycleReconciler

logger = logging.getLogger(__name__)


class PresenceChange(enum.Enum):
    NONE = "none"
    JOINED = "joined"
    LEFT = "left"
    MOVED = "moved"


class PresenceEventRouter:
    """Classe un changement d'état vocal et déclenche les chemins join / leave.

    Un déplacement déclenche les deux chemins en parallèle, sans ordre garanti :
    chacun doit être correct seul. Les erreurs sont journalisées ici et ne
    remontent jamais au client gateway.
    """

    def __init__(self, reconciler: LifecycleReconciler):
        self.reconciler = reconciler
        self.handlers: Dict[PresenceChange, Tuple[Callable[[PresenceEvent], Awaitable[object]], ...]] = {
            PresenceChange.NONE: (),
            PresenceChange.JOINED: (self._join,),
            PresenceChange.LEFT: (self._leave,),
            PresenceChange.MOVED: (self._join, self._leave),
        }

    @staticmethod
    def classify(event: PresenceEvent) -> PresenceChange:
        before, after = event.before_channel_id, event.after_channel_id
        # Mute, sourdine, stream... : même salon avant/après
        if before == after:
            return PresenceChange.NONE
        if before is None:
            return PresenceChange.JOINED
        if after is None:
            return PresenceChange.LEFT
        return PresenceChange.MOVED

    async def route(self, event: PresenceEvent) -> PresenceChange:
        change = self.classify(event)
        handlers = self.handlers[change]
        if handlers:
            await asyncio.gather(*(self._guarded(h, event) for h in handlers))
        return change

    async def _join(self, event: PresenceEvent):
        return await self.reconciler.on_join(event.user_id, event.user_name, event.after_channel_id, event.guild_id)

    async def _leave(self, event: PresenceEvent):
        return await self.reconciler.on_leave(event.user_id, event.before_channel_id)

    async def _guarded(self, handler, event: PresenceEvent) -> None:
        try:
            await handler(event)
        except (ExternalCallError, StoreError) as exc:
            logger.error("Echec %s pour %s (guild %s): %s", handler.__name__.lstrip("_"), event.user_id, event.guild_id, exc)
        except Exception:  # noqa: BLE001
            logger.exception("Erreur inattendue %s pour %s (guild %s)", handler.__name__.lstrip("_"), event.user_id, event.guild_id)


__all__ = ["PresenceChange", "PresenceEventRouter"]
