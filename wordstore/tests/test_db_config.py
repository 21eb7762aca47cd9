from __future__ import annotations

import os

from wordstore import db


def _write_cfg(tmp_path, text: str) -> str:
    p = tmp_path / "config.yaml"
    p.write_text(text, encoding="utf-8")
    return str(p)


def test_env_path_wins_over_config(tmp_path, monkeypatch):
    cfg = _write_cfg(tmp_path, f"db_path: {tmp_path / 'cfg.db'}\n")
    monkeypatch.setenv("WORD_CONFIG_PATH", cfg)
    monkeypatch.setenv("WORD_DB_PATH", str(tmp_path / "env" / "words.db"))
    path = db.get_db_path()
    assert path == str(tmp_path / "env" / "words.db")
    # parent directory is created on resolution
    assert os.path.isdir(tmp_path / "env")


def test_test_db_path_used_under_pytest(tmp_path, monkeypatch):
    cfg = _write_cfg(
        tmp_path,
        f"db_path: {tmp_path / 'prod.db'}\ntest_db_path: {tmp_path / 'test.db'}\n",
    )
    monkeypatch.setenv("WORD_CONFIG_PATH", cfg)
    monkeypatch.delenv("WORD_DB_PATH", raising=False)
    assert db.get_db_path() == str(tmp_path / "test.db")


def test_db_path_from_config_outside_tests(tmp_path, monkeypatch):
    cfg = _write_cfg(
        tmp_path,
        f"db_path: {tmp_path / 'prod.db'}\ntest_db_path: {tmp_path / 'test.db'}\n",
    )
    monkeypatch.setenv("WORD_CONFIG_PATH", cfg)
    monkeypatch.delenv("WORD_DB_PATH", raising=False)
    monkeypatch.delenv("PYTEST_CURRENT_TEST", raising=False)
    monkeypatch.delenv("APP_ENV", raising=False)
    assert db.get_db_path() == str(tmp_path / "prod.db")


def test_read_config_defaults_when_missing(tmp_path, monkeypatch):
    monkeypatch.setenv("WORD_CONFIG_PATH", str(tmp_path / "nope.yaml"))
    cfg = db.read_config()
    assert cfg["mutation_workers"] == 2
    assert cfg["seed_words"] == []
    assert "db_path" not in cfg


def test_read_config_tolerates_bad_values(tmp_path, monkeypatch):
    cfg = _write_cfg(tmp_path, "mutation_workers: lots\nseed_words: Hello\n")
    monkeypatch.setenv("WORD_CONFIG_PATH", cfg)
    out = db.read_config()
    assert out["mutation_workers"] == 2
    assert out["seed_words"] == []


def test_read_config_malformed_yaml(tmp_path, monkeypatch):
    cfg = _write_cfg(tmp_path, "db_path: [unclosed\n")
    monkeypatch.setenv("WORD_CONFIG_PATH", cfg)
    assert db.read_config()["mutation_workers"] == 2


def test_seed_words_from_config(tmp_path, monkeypatch):
    cfg = _write_cfg(tmp_path, "mutation_workers: 1\nseed_words:\n  - Hello\n  - World!\n")
    monkeypatch.setenv("WORD_CONFIG_PATH", cfg)
    from wordstore.services.word_store import WordStore
    with WordStore(str(tmp_path / "seeded.db")) as s:
        assert s.snapshot() == ["Hello", "World!"]
