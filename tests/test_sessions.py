"""Tests for core.sessions.SessionStore."""

from unittest.mock import patch

from core.sessions import SessionStore
from core.state import CodeArtifact


def test_save_and_get():
    store = SessionStore()
    artifact = CodeArtifact(markup="<p>")
    store.save("s1", "P1/m1", artifact)
    assert store.get("s1", "P1/m1") is artifact
    assert store.get("s1", "P2/m1") is None


def test_unknown_session():
    store = SessionStore()
    assert store.get("nope", "P1/m1") is None
    assert store.snapshot("nope") is None
    assert store.snapshot("") is None


def test_snapshot_returns_copy():
    store = SessionStore()
    store.save("s1", "a", CodeArtifact())
    snap = store.snapshot("s1")
    snap["b"] = CodeArtifact()
    assert set(store.snapshot("s1")) == {"a"}


def test_expired_session_dropped():
    store = SessionStore(ttl=10)
    with patch("core.sessions.time.time", return_value=1000.0):
        store.save("s1", "a", CodeArtifact())
    with patch("core.sessions.time.time", return_value=1011.0):
        assert store.get("s1", "a") is None


def test_oldest_sessions_evicted_over_limit():
    store = SessionStore(max_sessions=2)
    for i, sid in enumerate(["old", "mid", "new"]):
        with patch("core.sessions.time.time", return_value=1000.0 + i):
            store.save(sid, "a", CodeArtifact())
    with patch("core.sessions.time.time", return_value=1003.0):
        assert store.snapshot("old") is None
        assert store.snapshot("mid") is not None
        assert store.snapshot("new") is not None


def test_new_ids_are_unique():
    assert SessionStore.new_id() != SessionStore.new_id()
