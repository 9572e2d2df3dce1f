from __future__ import annotations

import logging

from core.errors import CompensationFailure, ExternalCallError, NotFound, StoreError
from .models import ChannelKind, ChannelSpec
from .provisioner import ResourceProvisioner
from .store import RecordStore

logger = logging.getLogger(__name__)


class LifecycleReconciler:
    """Décide de la création et de la suppression des salons temporaires.

    Responsabilités:
        - Join dans un salon créateur -> clone du créateur, enregistrement, déplacement du membre.
        - Départ d'un salon temporaire -> suppression s'il est vide (état vocal temps réel).
        - Annulation best-effort d'une création partielle (une seule tentative, pas de relance).

    Le type d'un salon n'est jamais stocké ailleurs que dans le registre : chaque
    transition relit `RecordStore`. Aucun verrou : deux joins simultanés dans le
    même créateur produisent deux salons, deux départs simultanés peuvent tenter
    deux suppressions (la seconde voit un salon déjà supprimé).
    """

    def __init__(self, store: RecordStore, provisioner: ResourceProvisioner):
        self.store = store
        self.provisioner = provisioner

    async def on_join(self, user_id: int, user_name: str, channel_id: int, guild_id: int) -> int | None:
        """
        Crée un salon temporaire si `channel_id` est un salon créateur.
        Returns : id du salon créé, None si le salon rejoint n'est pas un créateur
        """
        try:
            record = await self.store.lookup(channel_id)
        except NotFound:
            return None
        if record.kind is not ChannelKind.CREATOR:
            return None

        attrs = await self.provisioner.read_attributes(channel_id)
        spec = ChannelSpec.cloned_from(attrs, user_name, reason=f"Salon temporaire (créateur {channel_id})")
        temp_id = await self.provisioner.create(guild_id, spec)

        try:
            await self.store.insert(ChannelKind.TEMPORARY, temp_id, guild_id)
        except StoreError as exc:
            await self.compensate(temp_id, exc)
            raise

        try:
            await self.provisioner.move(guild_id, user_id, temp_id, reason="Déplacement vers salon temporaire")
        except ExternalCallError as exc:
            await self.compensate(temp_id, exc, registered=True)
            raise

        logger.info("Salon temporaire %s créé pour %s (%s) depuis %s", temp_id, user_name, user_id, channel_id)
        return temp_id

    async def on_leave(self, user_id: int, channel_id: int) -> bool:
        """
        Supprime le salon temporaire quitté s'il est vide.
        Returns : True si le salon et son enregistrement ont été supprimés
        """
        try:
            record = await self.store.lookup(channel_id)
        except NotFound:
            return False
        if record.kind is not ChannelKind.TEMPORARY:
            return False

        # Ne jamais supprimer un salon occupé ; le compte vient du cache gateway, pas de l'événement
        occupants = self.provisioner.occupancy(channel_id)
        if occupants > 0:
            logger.debug("Salon temporaire %s encore occupé (%s) après départ de %s", channel_id, occupants, user_id)
            return False

        # Suppression Discord d'abord : en cas d'échec l'enregistrement reste pour une prochaine tentative
        await self.provisioner.delete(channel_id, reason="Salon temporaire vide")
        await self.store.remove(channel_id)
        logger.info("Salon temporaire %s supprimé (vide)", channel_id)
        return True

    async def compensate(self, channel_id: int, cause: BaseException, *, registered: bool = False) -> bool:
        """
        Annule la création d'un salon dont une étape dépendante a échoué.

        Une seule tentative. L'enregistrement éventuel est retiré dans tous les cas ;
        si la suppression Discord échoue, le salon devient orphelin (journalisé).
        Returns : True si l'annulation est complète
        """
        complete = True
        try:
            await self.provisioner.delete(channel_id, reason="Annulation création salon")
        except ExternalCallError as exc:
            failure = CompensationFailure(channel_id, cause, exc)
            logger.warning("Salon orphelin %s (non suivi en base, nettoyage manuel requis): %s", channel_id, failure)
            complete = False
        if registered:
            try:
                await self.store.remove(channel_id)
            except StoreError as exc:
                failure = CompensationFailure(channel_id, cause, exc)
                logger.warning("Enregistrement %s non retiré du registre: %s", channel_id, failure)
                complete = False
        if complete:
            logger.info("Création du salon %s annulée après échec: %s", channel_id, cause)
        return complete


__all__ = ["LifecycleReconciler"]
