from __future__ import annotations

# wordstore/services/word_svc.py
import threading
from typing import Optional

from .word_store import WordStore

_store: Optional[WordStore] = None
_store_lock = threading.Lock()


def get_store() -> WordStore:
    """Process-wide store bound to the configured DB path; opened on first use."""
    global _store
    with _store_lock:
        if _store is None:
            _store = WordStore()
        return _store


def reset_store():
    """Close the default store so the next get_store() reopens it (tests, path changes)."""
    global _store
    with _store_lock:
        if _store is not None:
            _store.close()
        _store = None


def list_words() -> list[str]:
    return get_store().snapshot()


def add_word(word: str):
    get_store().insert(word)


def clear_words():
    get_store().delete_all()
