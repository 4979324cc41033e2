"""Per-browser-session shopper state for the HTTP layer."""
import time
from collections import OrderedDict
from typing import Callable, Optional, Tuple
from storefront.config import settings
from storefront.database.connection import SessionLocal
from storefront.utils.identity import AccountDirectory, Anonymous, IdentityService
from storefront.utils.notifications import BufferedNotificationSink
from storefront.utils.profiles import ProfileAccountDirectory
from storefront.utils.reconciliation import StorefrontSession
from storefront.utils.storage import CollectionStore, DatabaseCollectionStore


class SessionRegistry:
    """
    Creates and caches one StorefrontSession per browser session id.
    
    Each browser session shops as its own guest (``Anonymous(session_id)``),
    so guest carts never mix. All sessions share the store and the account
    directory. Sessions idle for longer than ``idle_seconds`` are evicted, as
    is the least recently used one once ``max_sessions`` is exceeded; an
    evicted guest gets its persisted cart back on the next request.
    """
    
    def __init__(
        self,
        store: CollectionStore,
        accounts: AccountDirectory,
        max_sessions: Optional[int] = None,
        idle_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic
    ):
        """
        Initialize an empty registry.
        
        Args:
            store: Collection store shared by all sessions
            accounts: Registered accounts shared by all sessions
            max_sessions: Sessions kept at most (defaults to settings.session_max_count)
            idle_seconds: Idle time before eviction (defaults to settings.session_idle_seconds)
            clock: Source of the current time
        """
        self.store = store
        self.accounts = accounts
        self.max_sessions = max_sessions if max_sessions is not None else settings.session_max_count
        self.idle_seconds = idle_seconds if idle_seconds is not None else settings.session_idle_seconds
        self.clock = clock
        # session_id -> (session, last access), least recently used first
        self._sessions: "OrderedDict[str, Tuple[StorefrontSession, float]]" = OrderedDict()
    
    def __len__(self) -> int:
        return len(self._sessions)
    
    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions
    
    def get(self, session_id: str) -> StorefrontSession:
        """Get the shopper session for ``session_id``, creating it on first use."""
        now = self.clock()
        self._evict_idle(now)
        
        entry = self._sessions.pop(session_id, None)
        if entry is None:
            session = StorefrontSession(
                identity_service=IdentityService(guest=Anonymous(session_id), accounts=self.accounts),
                store=self.store,
                notifier=BufferedNotificationSink()
            )
        else:
            session = entry[0]
        self._sessions[session_id] = (session, now)
        
        while len(self._sessions) > self.max_sessions:
            evicted_id, (evicted, _) = self._sessions.popitem(last=False)
            evicted.close()
            print(f"[SESSIONS] Evicted {evicted_id} (capacity {self.max_sessions})")
        
        return session
    
    def reset(self):
        """Close and forget every session."""
        for session, _ in self._sessions.values():
            session.close()
        self._sessions = OrderedDict()
    
    def _evict_idle(self, now: float):
        while self._sessions:
            session_id, (session, last_seen) = next(iter(self._sessions.items()))
            if now - last_seen <= self.idle_seconds:
                break
            del self._sessions[session_id]
            session.close()
            print(f"[SESSIONS] Evicted idle {session_id}")


# Global session registry instance
session_registry = SessionRegistry(
    DatabaseCollectionStore(SessionLocal),
    ProfileAccountDirectory(SessionLocal)
)
