"""
Fixtures partagées : registre et provisioner en mémoire, interactions factices.
"""

import itertools
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import discord
import pytest

from core.errors import DuplicateRecord, ExternalCallError, NotFound, StoreError
from core.tempvoice.models import ChannelAttributes, ChannelKind, ChannelRecord
from core.tempvoice.reconciler import LifecycleReconciler

GUILD_ID = 1000


def http_error(status: int = 500, text: str = "boom") -> discord.HTTPException:
    response = Mock(status=status, reason="Error")
    if status == 404:
        return discord.NotFound(response, text)
    if status == 403:
        return discord.Forbidden(response, text)
    return discord.HTTPException(response, text)


class FakeStore:
    """Registre en mémoire avec pannes injectables."""

    def __init__(self):
        self.records = {}
        self.fail_insert = False
        self.fail_remove = False
        self.fail_lookup = False

    def add(self, kind, channel_id, guild_id=GUILD_ID):
        self.records[channel_id] = ChannelRecord(channel_id, kind, guild_id)

    async def lookup(self, channel_id):
        if self.fail_lookup:
            raise StoreError("lookup en panne")
        try:
            return self.records[channel_id]
        except KeyError:
            raise NotFound(channel_id) from None

    async def insert(self, kind, channel_id, guild_id):
        if self.fail_insert:
            raise StoreError("insert en panne")
        if channel_id in self.records:
            raise DuplicateRecord(channel_id)
        record = ChannelRecord(channel_id, ChannelKind(kind), guild_id)
        self.records[channel_id] = record
        return record

    async def remove(self, channel_id):
        if self.fail_remove:
            raise StoreError("remove en panne")
        return self.records.pop(channel_id, None) is not None

    async def list_by_group(self, kind, guild_id):
        found = [r for r in self.records.values() if r.kind is kind and r.guild_id == guild_id]
        if not found:
            raise NotFound(guild_id)
        return found

    def temporaries(self):
        return [r for r in self.records.values() if r.kind is ChannelKind.TEMPORARY]


class FakeProvisioner:
    """Discord en mémoire : salons, occupants, journal des appels."""

    def __init__(self):
        self.channels = {}
        self.occupants = {}
        self.guild_names = {GUILD_ID: "Guilde Test"}
        self.calls = []
        self.fail_create = False
        self.fail_move = False
        self.fail_delete = False
        self.fail_edit = False
        self._ids = itertools.count(5000)

    def add_channel(self, channel_id, *, name="salon", user_limit=0, position=0, category_id=None, guild_id=GUILD_ID):
        self.channels[channel_id] = dict(
            name=name, user_limit=user_limit, position=position, category_id=category_id, guild_id=guild_id
        )

    async def read_attributes(self, channel_id):
        self.calls.append(("read_attributes", channel_id))
        ch = self.channels.get(channel_id)
        if ch is None:
            raise ExternalCallError("lecture salon", channel_id, http_error(404))
        return ChannelAttributes(user_limit=ch["user_limit"], position=ch["position"], category_id=ch["category_id"])

    async def create(self, guild_id, spec):
        self.calls.append(("create", guild_id, spec))
        if self.fail_create:
            raise ExternalCallError("création salon", guild_id, http_error())
        channel_id = next(self._ids)
        self.add_channel(
            channel_id, name=spec.name, user_limit=spec.user_limit, position=spec.position,
            category_id=spec.category_id, guild_id=guild_id,
        )
        return channel_id

    async def delete(self, channel_id, reason=None):
        self.calls.append(("delete", channel_id))
        if self.fail_delete:
            raise ExternalCallError("suppression salon", channel_id, http_error())
        if self.channels.pop(channel_id, None) is None:
            return False
        self.occupants.pop(channel_id, None)
        return True

    async def move(self, guild_id, user_id, channel_id, reason=None):
        self.calls.append(("move", guild_id, user_id, channel_id))
        if self.fail_move:
            raise ExternalCallError("déplacement membre", channel_id, http_error(400))
        for members in self.occupants.values():
            members.discard(user_id)
        self.occupants.setdefault(channel_id, set()).add(user_id)

    async def edit(self, channel_id, reason=None, **changes):
        self.calls.append(("edit", channel_id, changes))
        if self.fail_edit:
            raise ExternalCallError("édition salon", channel_id, http_error(403))
        self.channels[channel_id].update(changes)

    def occupancy(self, channel_id):
        return len(self.occupants.get(channel_id, ()))

    async def guild_name(self, guild_id):
        return self.guild_names[guild_id]

    async def channel_names(self, guild_id):
        return {cid: ch["name"] for cid, ch in self.channels.items() if ch["guild_id"] == guild_id}

    def external_calls(self, name):
        return [c for c in self.calls if c[0] == name]


class FakeConnection:
    """Connexion asyncpg factice : chaque méthode est un AsyncMock réglable."""

    def __init__(self):
        self.fetchrow = AsyncMock(return_value=None)
        self.fetch = AsyncMock(return_value=[])
        self.execute = AsyncMock(return_value="DELETE 0")


class _Acquire:
    def __init__(self, conn):
        self.conn = conn

    async def __aenter__(self):
        return self.conn

    async def __aexit__(self, *exc):
        return False


class FakePool:
    def __init__(self):
        self.conn = FakeConnection()

    def acquire(self):
        return _Acquire(self.conn)


class FakeResponse:
    def __init__(self):
        self.done = False
        self.sent = []
        self.deferred = False
        self.choices = None

    def is_done(self):
        return self.done

    async def send_message(self, content=None, *, ephemeral=False):
        self.done = True
        self.sent.append(content)

    async def defer(self, *, ephemeral=False, thinking=False):
        self.done = True
        self.deferred = True

    async def autocomplete(self, choices):
        self.done = True
        self.choices = list(choices)


class FakeInteraction:
    def __init__(self, data, *, autocomplete=False, guild_id=GUILD_ID, permissions=None, client=None):
        self.data = data
        self.type = discord.InteractionType.autocomplete if autocomplete else discord.InteractionType.application_command
        self.guild_id = guild_id
        self.guild = SimpleNamespace(id=guild_id) if guild_id is not None else None
        perms = discord.Permissions.all() if permissions is None else discord.Permissions(permissions)
        self.user = SimpleNamespace(id=42, guild_permissions=perms)
        self.client = client
        self.response = FakeResponse()
        self.edits = []

    async def edit_original_response(self, *, content=None):
        self.edits.append(content)

    @property
    def replies(self):
        return self.response.sent + self.edits


def command_data(*path, options=None):
    """Construit `interaction.data` pour un chemin de commande imbriqué."""
    leaf = {"name": path[-1], "type": 1, "options": list(options or [])}
    node = leaf
    for name in reversed(path[1:-1]):
        node = {"name": name, "type": 2, "options": [node]}
    return {"name": path[0], "type": 1, "options": [node] if len(path) > 1 else leaf["options"]}


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def provisioner():
    return FakeProvisioner()


@pytest.fixture
def reconciler(store, provisioner):
    return LifecycleReconciler(store, provisioner)


@pytest.fixture
def tempvoice_client(store, provisioner, reconciler):
    tv = SimpleNamespace(store=store, provisioner=provisioner, reconciler=reconciler)
    return SimpleNamespace(tempvoice=tv, db_pool=object())


@pytest.fixture
def pool():
    return FakePool()
