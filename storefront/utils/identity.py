"""Shopper identity and the sign-in/sign-out event stream."""
from dataclasses import dataclass
from typing import Callable, List, Optional, Set, Union

ANONYMOUS_SCOPE = "anonymous"


@dataclass(frozen=True)
class Anonymous:
    """
    A guest shopper that has not signed in.
    
    Guests of different browser sessions are kept apart by ``session_id``;
    the bare ``Anonymous()`` is the guest of a single-shopper process.
    """
    session_id: str = ""
    
    @property
    def scope(self) -> str:
        if self.session_id:
            return f"{ANONYMOUS_SCOPE}:{self.session_id}"
        return ANONYMOUS_SCOPE


@dataclass(frozen=True)
class Authenticated:
    """A signed-in shopper."""
    user_id: str
    
    def __post_init__(self):
        if not self.user_id:
            raise ValueError("Authenticated identity requires a user id")
        # Guest keys are "cart:anonymous" and "cart:anonymous:<session>"
        if self.user_id == ANONYMOUS_SCOPE or self.user_id.startswith(f"{ANONYMOUS_SCOPE}:"):
            raise ValueError(f"'{self.user_id}' is not a valid user id")
    
    @property
    def scope(self) -> str:
        return self.user_id


Identity = Union[Anonymous, Authenticated]

ANONYMOUS = Anonymous()


def cart_scope_key(identity: Identity) -> str:
    """Storage key of the cart belonging to ``identity``."""
    return f"cart:{identity.scope}"


def wishlist_scope_key(identity: Identity) -> str:
    """Storage key of the wishlist belonging to ``identity``."""
    return f"wishlist:{identity.scope}"


@dataclass(frozen=True)
class IdentityEvent:
    """An identity transition published by the identity service."""
    kind: str  # "signed-in" or "signed-out"
    identity: Identity
    
    SIGNED_IN = "signed-in"
    SIGNED_OUT = "signed-out"
    
    @classmethod
    def signed_in(cls, user_id: str) -> "IdentityEvent":
        return cls(kind=cls.SIGNED_IN, identity=Authenticated(user_id))
    
    @classmethod
    def signed_out(cls, guest: Anonymous = ANONYMOUS) -> "IdentityEvent":
        return cls(kind=cls.SIGNED_OUT, identity=guest)


IdentityHandler = Callable[[IdentityEvent], None]


class AccountDirectory:
    """Registered account ids, shared by every identity service of a process."""
    
    def is_registered(self, user_id: str) -> bool:
        raise NotImplementedError
    
    def register(self, user_id: str):
        raise NotImplementedError


class MemoryAccountDirectory(AccountDirectory):
    """Account ids held in a set."""
    
    def __init__(self):
        self._user_ids: Set[str] = set()
    
    def is_registered(self, user_id: str) -> bool:
        return user_id in self._user_ids
    
    def register(self, user_id: str):
        self._user_ids.add(user_id)


class IdentityService:
    """
    In-process identity provider.
    
    Tracks the current identity of one shopper and notifies subscribers of
    every transition. Stands in for a hosted auth service: accounts are only
    user ids, there are no credentials.
    """
    
    def __init__(
        self,
        current: Optional[Identity] = None,
        guest: Anonymous = ANONYMOUS,
        accounts: Optional[AccountDirectory] = None
    ):
        """
        Initialize the identity service.
        
        Args:
            current: Identity restored from an existing session, if any
            guest: Identity of this shopper while signed out
            accounts: Directory of registered accounts (a private one by default)
        """
        self.guest = guest
        self.accounts = accounts or MemoryAccountDirectory()
        self._current: Identity = current or guest
        self._handlers: List[IdentityHandler] = []
        if isinstance(self._current, Authenticated) and not self.accounts.is_registered(self._current.user_id):
            self.accounts.register(self._current.user_id)
    
    @property
    def current(self) -> Identity:
        return self._current
    
    @property
    def current_user_id(self) -> Optional[str]:
        if isinstance(self._current, Authenticated):
            return self._current.user_id
        return None
    
    def subscribe(self, handler: IdentityHandler) -> Callable[[], None]:
        """
        Register a handler for identity transitions.
        
        Args:
            handler: Callable receiving each IdentityEvent
            
        Returns:
            Callable that removes the handler again
        """
        self._handlers.append(handler)
        
        def unsubscribe():
            if handler in self._handlers:
                self._handlers.remove(handler)
        
        return unsubscribe
    
    def sign_up(self, user_id: str) -> Identity:
        """Register a new account and sign it in."""
        if self.accounts.is_registered(user_id):
            raise ValueError(f"User '{user_id}' is already registered")
        return self.sign_in(user_id)
    
    def sign_in(self, user_id: str) -> Identity:
        """Sign in ``user_id`` and publish a signed-in event."""
        event = IdentityEvent.signed_in(user_id)
        if not self.accounts.is_registered(user_id):
            self.accounts.register(user_id)
        self._current = event.identity
        print(f"[IDENTITY] Signed in {user_id}")
        self.publish(event)
        return self._current
    
    def sign_out(self) -> Identity:
        """Sign out the current user and publish a signed-out event."""
        if isinstance(self._current, Anonymous):
            return self._current
        print(f"[IDENTITY] Signed out {self._current.user_id}")
        self._current = self.guest
        self.publish(IdentityEvent.signed_out(self.guest))
        return self._current
    
    def publish(self, event: IdentityEvent):
        """
        Deliver ``event`` to every subscriber.
        
        A failing handler is reported and does not stop delivery to the rest.
        Redelivering the same event is allowed; handlers must tolerate it.
        """
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception as e:
                print(f"[IDENTITY] Handler error for {event.kind}: {e}")
