import os
import sys
import sqlite3
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("db") / "words_test.db"
    # Point the package to this temp DB and away from any real config.yaml
    os.environ["WORD_DB_PATH"] = str(path)
    os.environ["WORD_CONFIG_PATH"] = str(path.parent / "missing-config.yaml")
    from wordstore.logs import ensure_log_schema
    ensure_log_schema(str(path))
    return str(path)


@pytest.fixture()
def store(tmp_db_path):
    from wordstore.services.word_store import WordStore
    s = WordStore(tmp_db_path)
    yield s
    s.close()


@pytest.fixture()
def client(tmp_db_path):
    from wordstore.services.word_svc import reset_store
    from wordstore.api import app
    from fastapi.testclient import TestClient
    reset_store()
    yield TestClient(app)
    reset_store()


@pytest.fixture(autouse=True)
def _clean_db(tmp_db_path):
    # Clean tables before each test for isolation
    # Safety: ensure we only ever wipe the temp DB, never a real one
    assert os.environ.get("WORD_DB_PATH") == tmp_db_path, "Refusing to clean non-temp DB"
    conn = sqlite3.connect(tmp_db_path)
    try:
        for t in ("word_table", "operation_log"):
            try:
                conn.execute(f"DELETE FROM {t}")
            except sqlite3.OperationalError:
                pass
        conn.commit()
    finally:
        conn.close()
    yield
