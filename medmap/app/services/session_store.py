import threading
import uuid

from ..exceptions import SessionNotFoundError
from ..schemas.graph import MindMapDocument
from .editor import MindMapEditor


class SessionStore:
    """In-memory editor sessions; everything is lost when the process exits."""

    def __init__(self, fact_checker=None):
        self.fact_checker = fact_checker
        self._sessions = {}
        self._lock = threading.Lock()

    def create(self, document: MindMapDocument):
        session_id = uuid.uuid4().hex
        editor = MindMapEditor(document, fact_checker=self.fact_checker)
        with self._lock:
            self._sessions[session_id] = editor
        return session_id, editor

    def get(self, session_id: str) -> MindMapEditor:
        with self._lock:
            editor = self._sessions.get(session_id)
        if editor is None:
            raise SessionNotFoundError(f"Session not found: {session_id}")
        return editor

    def delete(self, session_id: str):
        with self._lock:
            if self._sessions.pop(session_id, None) is None:
                raise SessionNotFoundError(f"Session not found: {session_id}")

    def __len__(self):
        with self._lock:
            return len(self._sessions)
