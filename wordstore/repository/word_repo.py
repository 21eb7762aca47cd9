from sqlite3 import Connection


def ensure_schema(conn: Connection) -> bool:
    """Create word_table if missing; returns True when it was created just now."""
    existed = conn.execute(
        "SELECT 1 FROM sqlite_master WHERE type='table' AND name='word_table'"
    ).fetchone() is not None
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS word_table (
            word TEXT PRIMARY KEY NOT NULL
        )
        """
    )
    return not existed


def insert(conn: Connection, word: str) -> bool:
    """INSERT OR IGNORE; returns True only when a new row was written."""
    cur = conn.execute("INSERT OR IGNORE INTO word_table(word) VALUES(?)", (word,))
    return cur.rowcount > 0


def delete_all(conn: Connection) -> int:
    cur = conn.execute("DELETE FROM word_table")
    return cur.rowcount


def list_alphabetized(conn: Connection) -> list[str]:
    rows = conn.execute("SELECT word FROM word_table ORDER BY word ASC").fetchall()
    return [r["word"] for r in rows]


def exists(conn: Connection, word: str) -> bool:
    row = conn.execute("SELECT 1 FROM word_table WHERE word=?", (word,)).fetchone()
    return row is not None


def count(conn: Connection) -> int:
    row = conn.execute("SELECT COUNT(1) AS cnt FROM word_table").fetchone()
    return int(row["cnt"])
