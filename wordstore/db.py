from __future__ import annotations

# wordstore/db.py
import sqlite3
from contextlib import contextmanager
from typing import Iterator
import os
import yaml

# DB path resolution order:
# 1) env WORD_DB_PATH (highest priority)
# 2) config.yaml test_db_path (when running under tests)
# 3) config.yaml db_path
# 4) fallback: <project root>/words.db
_PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))
_ROOT_DB = os.path.join(_PROJECT_ROOT, "words.db")

DEFAULTS = {
    "mutation_workers": 2,
    "seed_words": [],
}


def _config_path() -> str:
    return os.environ.get("WORD_CONFIG_PATH") or os.path.join(_PROJECT_ROOT, "config.yaml")


def _read_config_yaml() -> dict:
    cfg_path = _config_path()
    if not os.path.exists(cfg_path):
        return {}
    try:
        with open(cfg_path, "r", encoding="utf-8") as f:
            cfg = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}
    return cfg if isinstance(cfg, dict) else {}


def read_config() -> dict:
    """Typed view of config.yaml with defaults filled in."""
    cfg = _read_config_yaml()
    out = {}
    for k in ("db_path", "test_db_path"):
        v = cfg.get(k)
        if isinstance(v, str) and v.strip():
            out[k] = v.strip()

    workers = cfg.get("mutation_workers", DEFAULTS["mutation_workers"])
    try:
        workers = int(workers)
    except (TypeError, ValueError):
        workers = DEFAULTS["mutation_workers"]
    out["mutation_workers"] = max(1, workers)

    seeds = cfg.get("seed_words")
    if isinstance(seeds, list):
        out["seed_words"] = [str(w) for w in seeds if w is not None]
    else:
        out["seed_words"] = list(DEFAULTS["seed_words"])
    return out


def get_db_path() -> str:
    env_path = os.environ.get("WORD_DB_PATH")
    cfg = read_config()
    cfg_db = cfg.get("db_path")
    cfg_test = cfg.get("test_db_path")
    is_test = (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)

    if env_path:
        path = env_path
    elif is_test and cfg_test:
        path = cfg_test
    elif cfg_db:
        path = cfg_db
    else:
        path = _ROOT_DB

    # make sure the directory exists
    dirn = os.path.dirname(path) or "."
    os.makedirs(dirn, exist_ok=True)
    return path


@contextmanager
def get_conn(db_path: str | None = None) -> Iterator[sqlite3.Connection]:
    """
    Open an SQLite connection. An explicit db_path wins, otherwise get_db_path().
    Autocommit mode (isolation_level=None): every statement commits on its own.
    row_factory is sqlite3.Row.
    """
    path = db_path or get_db_path()
    conn = sqlite3.connect(
        path,
        check_same_thread=False,
        isolation_level=None,
    )
    try:
        conn.row_factory = sqlite3.Row
        yield conn
    finally:
        conn.close()
