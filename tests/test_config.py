"""
Tests de la lecture de l'environnement et du filtre de déduplication des logs.
"""

import logging

import pytest

from core import config
from core.logging_config import DeduplicateFilter


@pytest.mark.parametrize(
    "raw, expected",
    [("1", True), ("TRUE", True), (" on ", True), ("0", False), ("no", False), ("peut-être", False), (None, False)],
)
def test_env_bool(monkeypatch, raw, expected):
    if raw is None:
        monkeypatch.delenv("DELETE_COMMANDS", raising=False)
    else:
        monkeypatch.setenv("DELETE_COMMANDS", raw)
    assert config.env_bool("DELETE_COMMANDS") is expected


def test_env_int(monkeypatch):
    monkeypatch.setenv("COMMAND_GUILD_ID", "1234")
    assert config.env_int("COMMAND_GUILD_ID") == 1234
    monkeypatch.setenv("COMMAND_GUILD_ID", "abc")
    assert config.env_int("COMMAND_GUILD_ID") is None
    monkeypatch.delenv("COMMAND_GUILD_ID")
    assert config.env_int("COMMAND_GUILD_ID") is None


class TestDatabaseUrl:

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in ("DATABASE_URL", "POSTGRES_HOST", "POSTGRES_PORT", "POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB"):
            monkeypatch.delenv(name, raising=False)

    def test_explicit_url_wins(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgres://u:p@db/x")
        monkeypatch.setenv("POSTGRES_HOST", "ignored")
        assert config.build_database_url() == "postgres://u:p@db/x"

    def test_assembled_from_parts(self, monkeypatch):
        monkeypatch.setenv("POSTGRES_HOST", "db")
        monkeypatch.setenv("POSTGRES_USER", "bot")
        monkeypatch.setenv("POSTGRES_PASSWORD", "secret")
        assert config.build_database_url() == "postgres://bot:secret@db:5432/bot"

    def test_nothing_configured(self):
        assert config.build_database_url() is None


def test_intents_are_minimal():
    assert config.INTENTS.guilds
    assert config.INTENTS.voice_states
    assert not config.INTENTS.members
    assert not config.INTENTS.message_content


def _record(level, msg):
    return logging.LogRecord("tempvoice", level, __file__, 1, msg, None, None)


def test_deduplicate_filter_drops_repeated_info():
    f = DeduplicateFilter()
    assert f.filter(_record(logging.INFO, "Salon 1 supprimé"))
    assert not f.filter(_record(logging.INFO, "Salon 1 supprimé"))
    assert f.filter(_record(logging.INFO, "Salon 2 supprimé"))


def test_deduplicate_filter_keeps_warnings():
    f = DeduplicateFilter()
    for _ in range(3):
        assert f.filter(_record(logging.WARNING, "Salon orphelin 1"))
