"""
Session Store
Live bidding sessions keyed by id, shared by the HTTP and Socket.IO handlers
"""

import logging
import threading
import uuid

from convention_config import ConventionConfig
from session import BiddingSession

logger = logging.getLogger(__name__)


class UnknownSession(KeyError):
    """No session with that id"""


class SessionStore:
    """Holds every open BiddingSession"""

    def __init__(self, predictor=None, threshold=None):
        self.predictor = predictor
        self.threshold = threshold
        self._sessions = {}
        self._lock = threading.Lock()

    def create(self, conventions=None):
        """Open a session; `conventions` are settings merged onto the defaults"""
        config = ConventionConfig()
        if conventions:
            config.apply_settings(conventions)
        extra = {} if self.threshold is None else {'threshold': self.threshold}
        session = BiddingSession(config=config, predictor=self.predictor, **extra)
        session_id = uuid.uuid4().hex
        with self._lock:
            self._sessions[session_id] = session
        logger.info("Opened session %s", session_id)
        return session_id, session

    def get(self, session_id):
        with self._lock:
            try:
                return self._sessions[session_id]
            except KeyError:
                raise UnknownSession(session_id) from None

    def remove(self, session_id):
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None:
            raise UnknownSession(session_id)
        session.cancel_pending()
        logger.info("Closed session %s", session_id)

    def reset(self):
        """Drop every session"""
        with self._lock:
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session.cancel_pending()

    def get_state(self, session_id):
        state = self.get(session_id).to_dict()
        state['session_id'] = session_id
        return state

    def __contains__(self, session_id):
        with self._lock:
            return session_id in self._sessions

    def __len__(self):
        with self._lock:
            return len(self._sessions)
