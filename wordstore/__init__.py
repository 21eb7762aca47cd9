"""wordstore: a durable, observable set of unique words on SQLite."""
from __future__ import annotations

__version__ = "0.1.0"

from .errors import StorageFailure
from .services.word_store import Subscription, WordEntry, WordStore

__all__ = ["StorageFailure", "Subscription", "WordEntry", "WordStore", "__version__"]
