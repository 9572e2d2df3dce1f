"""
Tests du registre persistant et de la traduction des erreurs asyncpg.
"""

import asyncpg
import pytest

from core.errors import DuplicateRecord, NotFound, StoreError
from core.tempvoice.models import ChannelKind, ChannelRecord
from core.tempvoice.store import RecordStore


def row(channel_id, kind="creator", guild_id=1000):
    return {"id": channel_id, "kind": kind, "guild_id": guild_id}


@pytest.fixture
def record_store(pool):
    return RecordStore(pool)


class TestLookup:

    @pytest.mark.asyncio
    async def test_found(self, record_store, pool):
        pool.conn.fetchrow.return_value = row(10, "temporary")

        assert await record_store.lookup(10) == ChannelRecord(10, ChannelKind.TEMPORARY, 1000)
        assert pool.conn.fetchrow.await_args.args[1:] == (10,)

    @pytest.mark.asyncio
    async def test_missing(self, record_store):
        with pytest.raises(NotFound):
            await record_store.lookup(10)

    @pytest.mark.asyncio
    async def test_connection_failure(self, record_store, pool):
        pool.conn.fetchrow.side_effect = ConnectionRefusedError("down")

        with pytest.raises(StoreError) as excinfo:
            await record_store.lookup(10)
        assert not isinstance(excinfo.value, NotFound)


class TestInsert:

    @pytest.mark.asyncio
    async def test_insert_returns_record(self, record_store, pool):
        pool.conn.fetchrow.return_value = row(20, "temporary", 1)

        record = await record_store.insert(ChannelKind.TEMPORARY, 20, 1)

        assert record == ChannelRecord(20, ChannelKind.TEMPORARY, 1)
        assert pool.conn.fetchrow.await_args.args[1:] == (20, "temporary", 1)

    @pytest.mark.asyncio
    async def test_duplicate(self, record_store, pool):
        pool.conn.fetchrow.side_effect = asyncpg.UniqueViolationError("duplicate key")

        with pytest.raises(DuplicateRecord):
            await record_store.insert(ChannelKind.CREATOR, 20, 1)

    @pytest.mark.asyncio
    async def test_server_error(self, record_store, pool):
        pool.conn.fetchrow.side_effect = asyncpg.PostgresError("boom")

        with pytest.raises(StoreError):
            await record_store.insert(ChannelKind.CREATOR, 20, 1)


class TestRemove:

    @pytest.mark.asyncio
    async def test_removed(self, record_store, pool):
        pool.conn.execute.return_value = "DELETE 1"
        assert await record_store.remove(10) is True

    @pytest.mark.asyncio
    async def test_already_absent(self, record_store):
        assert await record_store.remove(10) is False

    @pytest.mark.asyncio
    async def test_failure(self, record_store, pool):
        pool.conn.execute.side_effect = asyncpg.InterfaceError("pool closed")

        with pytest.raises(StoreError):
            await record_store.remove(10)


class TestListByGroup:

    @pytest.mark.asyncio
    async def test_lists_rows(self, record_store, pool):
        pool.conn.fetch.return_value = [row(10), row(11)]

        records = await record_store.list_by_group(ChannelKind.CREATOR, 1000)

        assert [r.id for r in records] == [10, 11]
        assert pool.conn.fetch.await_args.args[1:] == ("creator", 1000)

    @pytest.mark.asyncio
    async def test_empty_group(self, record_store):
        with pytest.raises(NotFound):
            await record_store.list_by_group(ChannelKind.TEMPORARY, 1000)
