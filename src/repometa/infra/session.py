from __future__ import annotations

"""
Active Session Holder.

Keeps track of the repository session the cache should use. Opening and
closing sessions is owned by the connection layer of the host application;
this holder only records the outcome.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActiveSession:
    session_id: str
    name: str = ""


class SessionHolder:
    """Thread-safe slot for the currently active session."""

    def __init__(self, session: Optional[ActiveSession] = None) -> None:
        self._lock = threading.Lock()
        self._session = session

    def activate(self, session_id: str, name: str = "") -> ActiveSession:
        session = ActiveSession(session_id=session_id, name=name)
        with self._lock:
            self._session = session
        logger.info(f"Session: Activated {name or session_id}.")
        return session

    def deactivate(self) -> None:
        with self._lock:
            self._session = None
        logger.info("Session: Deactivated.")

    def get_active_session(self) -> Optional[ActiveSession]:
        with self._lock:
            session = self._session
        if session is None or not session.session_id:
            return None
        return session
