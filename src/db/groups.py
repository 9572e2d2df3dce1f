"""
Helpers base de données pour les groupes (collections nommées rattachées à une guilde).

Schéma :
- tempvoice_group : id BIGSERIAL, name TEXT, guild_id BIGINT, unicité (guild_id, name)
"""
from __future__ import annotations

import asyncpg
from typing import List

from core import db
from core.tempvoice.models import Group


SCHEMA = """
CREATE TABLE IF NOT EXISTS tempvoice_group (
    id BIGSERIAL PRIMARY KEY,
    name TEXT NOT NULL,
    guild_id BIGINT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    UNIQUE (guild_id, name)
);
"""


async def ensure_schema(pool: asyncpg.Pool):
    await db.execute_schema(pool, SCHEMA)


async def create_group(pool: asyncpg.Pool, name: str, guild_id: int) -> Group:
    q = """
    INSERT INTO tempvoice_group(name, guild_id)
    VALUES($1,$2)
    RETURNING id, name, guild_id
    """
    row = await db.fetch_one(pool, q, name, guild_id)
    return Group.from_row(row)


async def fetch_groups(pool: asyncpg.Pool, guild_id: int) -> List[Group]:
    q = "SELECT id, name, guild_id FROM tempvoice_group WHERE guild_id=$1 ORDER BY id"
    rows = await db.fetch_many(pool, q, guild_id)
    return [Group.from_row(r) for r in rows]
