"""In-memory store of the last generated artifact per (session, model)."""

import threading
import time
import uuid

from config.defaults import DEFAULTS


class SessionStore:
    """Keeps each session's latest CodeArtifact per model, expiring old sessions.

    Sessions are keyed by an opaque id handed to the client. Entries expire
    after `ttl` seconds and the oldest sessions are dropped beyond
    `max_sessions`.
    """

    def __init__(self, ttl=None, max_sessions=None):
        self.ttl = ttl or DEFAULTS["session_ttl"]
        self.max_sessions = max_sessions or DEFAULTS["max_sessions"]
        self._sessions = {}     # id -> {"artifacts": {model: CodeArtifact}, "updated": ts}
        self._lock = threading.Lock()

    @staticmethod
    def new_id():
        return str(uuid.uuid4())[:8]

    def _cleanup(self):
        """Remove expired sessions. Called under _lock."""
        now = time.time()
        expired = [sid for sid, s in self._sessions.items() if now - s["updated"] > self.ttl]
        for sid in expired:
            del self._sessions[sid]
        # If still over limit, remove oldest
        if len(self._sessions) > self.max_sessions:
            by_age = sorted(self._sessions.items(), key=lambda x: x[1]["updated"])
            for sid, _ in by_age[:len(self._sessions) - self.max_sessions]:
                del self._sessions[sid]

    def save(self, session_id, model, artifact):
        with self._lock:
            session = self._sessions.setdefault(session_id, {"artifacts": {}, "updated": 0})
            session["artifacts"][model] = artifact
            session["updated"] = time.time()
            self._cleanup()

    def get(self, session_id, model):
        """Last artifact for this model, or None if unknown or expired."""
        artifacts = self.snapshot(session_id)
        if artifacts is None:
            return None
        return artifacts.get(model)

    def snapshot(self, session_id):
        """All artifacts of a session as {model: CodeArtifact}, or None."""
        if not session_id:
            return None
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if time.time() - session["updated"] > self.ttl:
                del self._sessions[session_id]
                return None
            return dict(session["artifacts"])

    def clear(self):
        with self._lock:
            self._sessions.clear()
