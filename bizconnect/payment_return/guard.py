"""
Garde de matérialisation: une seule passe « vérifier -> créer les commandes » par référence.
- Réservation Redis SET NX EX sur {prefix}:claim:{origin_id}:{reference}.
- La réservation n'est jamais relâchée après matérialisation (référence consommée).
- MATERIALIZATION_GUARD=false: la garde laisse tout passer (comportement historique).
"""
import logging

from bizconnect import config

logger = logging.getLogger(__name__)

def claim_key(origin_id: str, reference: str) -> str:
    return f"{config.STORAGE_KEY_PREFIX}:claim:{origin_id}:{reference}"

async def claim_reference(storage, reference: str) -> bool:
    """True si l'appelant obtient le droit de matérialiser `reference`."""
    if not config.MATERIALIZATION_GUARD:
        return True
    acquired = await storage.redis.set(
        claim_key(storage.origin_id, reference),
        "1",
        nx=True,
        ex=config.MATERIALIZATION_GUARD_TTL_SECONDS,
    )
    if not acquired:
        logger.info("payment_return.guard duplicate pass skipped reference=%s origin=%s", reference, storage.origin_id)
    return bool(acquired)

async def release_reference(storage, reference: str) -> None:
    """Relâche une réservation (passe abandonnée avant toute création de commande)."""
    if config.MATERIALIZATION_GUARD:
        await storage.redis.delete(claim_key(storage.origin_id, reference))
