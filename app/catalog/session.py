"""
Session state for catalogue consumers.

Authentication itself is handled by the hosted backend; this module only
models what the catalogue needs from it: the current ``SessionState``,
a way to be told when it changes, and a "begin login" action. Consumers
receive an ``AuthProvider`` explicitly (the FastAPI app keeps one on
``app.state``) and hold subscriptions through ``SessionScope`` so that a
discarded consumer is never called back. The routes open one scope per
request to read the session they act on.
"""

from __future__ import annotations

import itertools
import logging
import threading
from typing import Callable, Dict, Optional

from typing_extensions import Protocol

from .schemas import SessionState, User

logger = logging.getLogger(__name__)

Listener = Callable[[SessionState], None]
Unsubscribe = Callable[[], None]


class AuthProvider(Protocol):
    def current(self) -> SessionState:
        ...

    def subscribe(self, listener: Listener) -> Unsubscribe:
        ...

    def begin_login(self) -> None:
        ...


class LocalAuthProvider:
    """In-process session broadcaster.

    ``subscribe()`` delivers the current state immediately and then every
    change made through ``sign_in()``, ``sign_out()`` or
    ``set_loading()``. ``begin_login()`` hands off to ``on_login`` when
    one is given; otherwise it only records the request.
    """

    def __init__(
        self,
        user: Optional[User] = None,
        on_login: Optional[Callable[[], None]] = None,
    ) -> None:
        self._state = SessionState(user=user, is_loading=False)
        self._listeners: Dict[int, Listener] = {}
        self._ids = itertools.count()
        self._lock = threading.Lock()
        self._on_login = on_login
        self.login_requests = 0

    def current(self) -> SessionState:
        return self._state

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener) -> Unsubscribe:
        with self._lock:
            key = next(self._ids)
            self._listeners[key] = listener
        listener(self._state)

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(key, None)

        return unsubscribe

    def begin_login(self) -> None:
        self.login_requests += 1
        logger.info("Login requested")
        if self._on_login is not None:
            self._on_login()

    def sign_in(self, user: User) -> None:
        self._publish(SessionState(user=user, is_loading=False))

    def sign_out(self) -> None:
        self._publish(SessionState(user=None, is_loading=False))

    def set_loading(self, is_loading: bool) -> None:
        self._publish(self._state.model_copy(update={"is_loading": is_loading}))

    def _publish(self, state: SessionState) -> None:
        with self._lock:
            self._state = state
            listeners = list(self._listeners.values())
        for listener in listeners:
            try:
                listener(state)
            except Exception:
                logger.exception("Session listener failed")


class SessionScope:
    """Subscription held for the lifetime of a ``with`` block.

    ``state`` always reflects the latest delivered session. The optional
    ``listener`` is called on every change while the scope is open and
    never after it closes, even if the block raised::

        with SessionScope(provider) as scope:
            user = scope.state.user
    """

    def __init__(self, provider: AuthProvider, listener: Optional[Listener] = None) -> None:
        self.provider = provider
        self.listener = listener
        self.state = SessionState(is_loading=True)
        self.active = False
        self._unsubscribe: Optional[Unsubscribe] = None

    def _deliver(self, state: SessionState) -> None:
        if not self.active:
            return
        self.state = state
        if self.listener is not None:
            self.listener(state)

    def __enter__(self) -> "SessionScope":
        self.active = True
        self._unsubscribe = self.provider.subscribe(self._deliver)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.active = False
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
