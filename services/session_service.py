import logging
import threading
import time
import uuid
from typing import Callable, Dict, Optional, Tuple

from portal.login_client import ExamPortalClient

logger = logging.getLogger(__name__)


class PortalSessionStore:
    """
    Keeps one portal client per browser session between the CAPTCHA request
    and the login request. Memory only: everything is lost on restart.
    """

    def __init__(self, ttl_seconds: int = 1800,
                 client_factory: Callable[[], ExamPortalClient] = ExamPortalClient,
                 clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.client_factory = client_factory
        self.clock = clock
        self._sessions: Dict[str, Tuple[ExamPortalClient, float]] = {}
        self._lock = threading.Lock()

    def open(self, session_id: Optional[str] = None) -> Tuple[str, ExamPortalClient]:
        """Returns the client for `session_id`, creating one (and an id) if needed."""
        self.evict_expired()
        with self._lock:
            if session_id and session_id in self._sessions:
                client, _ = self._sessions[session_id]
            else:
                session_id = session_id or uuid.uuid4().hex
                client = self.client_factory()
                logger.info(f"Opened portal session {session_id}")
            self._sessions[session_id] = (client, self.clock())
            return session_id, client

    def get(self, session_id: str) -> Optional[ExamPortalClient]:
        self.evict_expired()
        with self._lock:
            entry = self._sessions.get(session_id)
            if not entry:
                return None
            client, _ = entry
            self._sessions[session_id] = (client, self.clock())
            return client

    def discard(self, session_id: str):
        with self._lock:
            entry = self._sessions.pop(session_id, None)
        if entry:
            entry[0].close()

    def evict_expired(self) -> int:
        now = self.clock()
        with self._lock:
            expired = [sid for sid, (_, seen) in self._sessions.items() if now - seen > self.ttl_seconds]
            clients = [self._sessions.pop(sid)[0] for sid in expired]

        for client in clients:
            client.close()
        if expired:
            logger.info(f"Evicted {len(expired)} idle portal sessions")
        return len(expired)

    def close_all(self):
        with self._lock:
            clients = [client for client, _ in self._sessions.values()]
            self._sessions.clear()
        for client in clients:
            client.close()

    def __len__(self) -> int:
        return len(self._sessions)
