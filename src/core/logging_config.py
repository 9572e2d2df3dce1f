"""
Configuration centralisée du logging pour le bot TempVoice.

Objectifs :
- Un seul setup idempotent (évite la duplication des handlers)
- Déduplication optionnelle des messages INFO/DEBUG identiques (rafales d'événements vocaux)
- Les warnings et erreurs (salons orphelins notamment) ne sont jamais filtrés
- Format uniforme configurable via variables d'environnement
"""
from __future__ import annotations

import logging
import threading
import os

_INITIALIZED = False

DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEFAULT_FORMAT = '[%(asctime)s] %(levelname)s %(name)s: %(message)s'
DEDUPLICATE = (os.getenv("LOG_DEDUPLICATE", "false") or "false").strip().lower() in {"1", "true", "yes", "on"}


class DeduplicateFilter(logging.Filter):
    def __init__(self, max_entries: int = 5000):
        super().__init__()
        self.max_entries = max_entries
        self._lock = threading.Lock()
        self._seen: set = set()

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        if record.levelno >= logging.WARNING:
            return True
        try:
            rendered = record.getMessage()
        except Exception:  # noqa: BLE001
            rendered = str(record.msg)
        key = (record.name, record.levelno, rendered)
        with self._lock:
            if key in self._seen:
                return False
            self._seen.add(key)
            # Limite la croissance mémoire (reset si trop gros)
            if len(self._seen) > self.max_entries:
                self._seen.clear()
        return True


def setup_logging(force: bool = False, *, level: str | None = None, deduplicate: bool | None = None) -> None:
    global _INITIALIZED
    if _INITIALIZED and not force:
        return

    root = logging.getLogger()
    if force:
        for h in list(root.handlers):
            root.removeHandler(h)
    if not root.handlers:
        root.addHandler(logging.StreamHandler())
    use_dedup = DEDUPLICATE if deduplicate is None else deduplicate
    for h in root.handlers:
        h.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        if use_dedup and not any(isinstance(f, DeduplicateFilter) for f in h.filters):
            h.addFilter(DeduplicateFilter())
    level_name = (level or DEFAULT_LEVEL).upper()
    root.setLevel(getattr(logging, level_name, logging.INFO))
    # discord.py est très bavard en DEBUG (payloads gateway)
    logging.getLogger("discord").setLevel(max(root.level, logging.INFO))
    _INITIALIZED = True


__all__ = ["setup_logging", "DeduplicateFilter"]
