import json
import logging
import os
import threading

from utils import settings

logger = logging.getLogger(__name__)

RECENT_KEY = "recentAddresses"

# one lock per file, shared by every session writing to it
_file_locks = {}
_file_locks_guard = threading.Lock()


def _file_lock(path):
    with _file_locks_guard:
        return _file_locks.setdefault(path, threading.Lock())


def add_recent(addresses, address, limit=settings.RECENT_ADDRESSES_LIMIT):
    """Most recent first, no duplicates (case-sensitive), at most `limit` entries."""
    return [address, *(a for a in addresses if a != address)][:limit]


def _parse(raw, source, limit):
    try:
        saved = json.loads(raw)
    except ValueError as e:
        logger.warning("Ignoring unreadable recent addresses in %s: %s", source, e)
        return []

    if not isinstance(saved, list):
        logger.warning("Ignoring malformed recent addresses in %s", source)
        return []

    return [a for a in saved if isinstance(a, str)][:limit]


class SessionRecentAddresses:
    """
    Recent addresses of one browser session, kept as a JSON array string
    under RECENT_KEY in that session's state mapping (st.session_state).
    """

    def __init__(self, state, limit=settings.RECENT_ADDRESSES_LIMIT):
        self.state = state
        self.limit = limit

    def load(self):
        raw = self.state.get(RECENT_KEY)
        if not raw:
            return []
        return _parse(raw, "session state", self.limit)

    def save(self, addresses):
        self.state[RECENT_KEY] = json.dumps(list(addresses)[: self.limit])

    def add(self, address):
        updated = add_recent(self.load(), address, self.limit)
        self.save(updated)
        return updated


class RecentAddressStore:
    """File-backed recent addresses for single-user deployments."""

    def __init__(self, path, limit=settings.RECENT_ADDRESSES_LIMIT):
        self.path = str(path)
        self.limit = limit

    def load(self):
        if not os.path.exists(self.path):
            return []

        try:
            with open(self.path, "r") as f:
                raw = f.read()
        except OSError as e:
            logger.warning("Ignoring unreadable recent addresses file %s: %s", self.path, e)
            return []

        return _parse(raw, self.path, self.limit)

    def save(self, addresses):
        try:
            os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
            with open(self.path, "w") as f:
                json.dump(list(addresses)[: self.limit], f)
        except OSError as e:
            logger.warning("Could not save recent addresses to %s: %s", self.path, e)

    def add(self, address):
        with _file_lock(self.path):
            updated = add_recent(self.load(), address, self.limit)
            self.save(updated)
        return updated


def recent_store(state):
    path = settings.recent_addresses_file()
    if path is not None:
        return RecentAddressStore(path)
    return SessionRecentAddresses(state)
