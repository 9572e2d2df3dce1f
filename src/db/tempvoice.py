"""
Helpers base de données pour les salons créateurs et temporaires.

Une seule table : la clé primaire garantit qu'un salon est enregistré sous un seul type.
"""
from __future__ import annotations
import asyncpg
from typing import Sequence

from core import db

TEMPVOICE_SCHEMA = """
CREATE TABLE IF NOT EXISTS tempvoice_channel (
    id BIGINT PRIMARY KEY,
    kind TEXT NOT NULL CHECK (kind IN ('creator', 'temporary')),
    guild_id BIGINT NOT NULL,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_tempvoice_channel_guild_kind ON tempvoice_channel(guild_id, kind);
"""

async def ensure_schema(pool: asyncpg.Pool):
    await db.execute_schema(pool, TEMPVOICE_SCHEMA)

async def fetch_channel(pool: asyncpg.Pool, channel_id: int) -> asyncpg.Record:
    q = "SELECT id, kind, guild_id FROM tempvoice_channel WHERE id=$1"
    return await db.fetch_one(pool, q, channel_id)

async def insert_channel(pool: asyncpg.Pool, channel_id: int, kind: str, guild_id: int) -> asyncpg.Record:
    q = """INSERT INTO tempvoice_channel(id, kind, guild_id) VALUES($1,$2,$3)
            RETURNING id, kind, guild_id"""
    return await db.fetch_one(pool, q, channel_id, kind, guild_id)

async def delete_channel(pool: asyncpg.Pool, channel_id: int) -> int:
    q = "DELETE FROM tempvoice_channel WHERE id=$1"
    return await db.execute(pool, q, channel_id)

async def fetch_channels_for_guild(pool: asyncpg.Pool, kind: str, guild_id: int) -> Sequence[asyncpg.Record]:
    q = "SELECT id, kind, guild_id FROM tempvoice_channel WHERE kind=$1 AND guild_id=$2 ORDER BY created_at, id"
    return await db.fetch_many(pool, q, kind, guild_id)

__all__ = ["ensure_schema", "fetch_channel", "insert_channel", "delete_channel", "fetch_channels_for_guild"]
