"""
Abstraction pour PostgreSQL via asyncpg.

Principes :
- Un pool global unique, créé à la demande (`get_pool`)
- Fonctions utilitaires atomiques (pas d'ORM) pour garder le contrôle
- Traduction systématique des erreurs : ligne absente -> `NotFound`,
  tout autre échec -> `StoreError` (`DuplicateRecord` sur violation d'unicité)
"""
from __future__ import annotations

import asyncpg
import logging
from typing import Any, Sequence

from core.errors import DuplicateRecord, NotFound, StoreError

logger = logging.getLogger(__name__)

_pool = None

# Erreurs traduites en StoreError (serveur, connexion, réseau)
_STORE_ERRORS = (asyncpg.PostgresError, asyncpg.InterfaceError, OSError)


async def get_pool(dsn: str):
    """
    Retourne (et crée si nécessaire) le pool asyncpg.
    Args :
        dsn : URL de connexion Postgres
    """
    global _pool
    if _pool is None:
        _pool = await asyncpg.create_pool(dsn, min_size=1, max_size=5)
        logger.info("Pool asyncpg initialisé")
    return _pool


async def close_pool() -> None:
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
        logger.info("Pool asyncpg fermé")


def translate_error(exc: BaseException, query: str) -> StoreError:
    summary = " ".join(query.split())[:80]
    if isinstance(exc, asyncpg.UniqueViolationError):
        return DuplicateRecord(f"doublon ({summary}): {exc}")
    return StoreError(f"requête en échec ({summary}): {exc}")


async def execute_schema(pool: asyncpg.Pool, schema: str) -> None:
    try:
        async with pool.acquire() as conn:
            await conn.execute(schema)
    except _STORE_ERRORS as exc:
        raise translate_error(exc, schema) from exc


async def fetch_one(pool: asyncpg.Pool, query: str, *args: Any):
    """
    Exécute une requête retournant une ligne.
    Raises : NotFound si aucune ligne, StoreError sinon en cas d'échec
    """
    try:
        async with pool.acquire() as conn:
            row = await conn.fetchrow(query, *args)
    except _STORE_ERRORS as exc:
        raise translate_error(exc, query) from exc
    if row is None:
        raise NotFound(f"aucune ligne pour {args!r}")
    return row


async def fetch_many(pool: asyncpg.Pool, query: str, *args: Any) -> Sequence[asyncpg.Record]:
    """
    Exécute une requête multi-lignes. Une liste vide n'est pas une erreur à ce niveau.
    """
    try:
        async with pool.acquire() as conn:
            return await conn.fetch(query, *args)
    except _STORE_ERRORS as exc:
        raise translate_error(exc, query) from exc


async def execute(pool: asyncpg.Pool, query: str, *args: Any) -> int:
    """
    Exécute une commande (INSERT/UPDATE/DELETE).
    Returns : nombre de lignes affectées (lu dans le statut asyncpg, ex: "DELETE 1")
    """
    try:
        async with pool.acquire() as conn:
            status = await conn.execute(query, *args)
    except _STORE_ERRORS as exc:
        raise translate_error(exc, query) from exc
    try:
        return int(str(status).rsplit(" ", 1)[-1])
    except ValueError:
        return 0


__all__ = ["get_pool", "close_pool", "execute_schema", "fetch_one", "fetch_many", "execute", "translate_error"]
