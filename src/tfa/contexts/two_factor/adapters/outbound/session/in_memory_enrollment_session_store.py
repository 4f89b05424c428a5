from __future__ import annotations

import threading

from tfa.contexts.two_factor.application.ports.enrollment_session_store import (
    EnrollmentSessionStore,
)


class InMemoryEnrollmentSessionStore(EnrollmentSessionStore):
    """
    InMemoryEnrollmentSessionStore — dictionary-backed store of one enrollment session.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/ports/enrollment_session_store.py
      - src/tfa/contexts/two_factor/application/use_cases/confirm_two_factor_enrollment.py
    """

    def __init__(self) -> None:
        self._values: dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> str | None:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def delete(self, key: str) -> None:
        self.pop(key)

    def pop(self, key: str) -> str | None:
        with self._lock:
            return self._values.pop(key, None)


class InMemoryEnrollmentSessionRegistry:
    """
    InMemoryEnrollmentSessionRegistry — per-session key/value maps keyed by session identity.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/adapters/inbound/api/routes/two_factor_totp.py
      - apps/api/wiring/modules/two_factor.py

    Pending secrets live only in process memory and are lost on restart, which
    forces the user to start enrollment again. A session entry is dropped as
    soon as its last key is removed, so finished enrollments hold no memory.
    """

    def __init__(self) -> None:
        self._sessions: dict[str, dict[str, str]] = {}
        self._lock = threading.Lock()

    def for_session(self, session_key: str) -> RegisteredEnrollmentSessionStore:
        """
        Return store view bound to session key.

        Args:
            session_key: Stable key of the caller session (user id in the HTTP API).
        Returns:
            RegisteredEnrollmentSessionStore: Session-scoped view over this registry.
        Assumptions:
            Views of the same key share state; holding a view keeps no entry alive.
        Raises:
            ValueError: If session key is blank.
        Side Effects:
            None.
        """
        normalized_key = session_key.strip()
        if not normalized_key:
            raise ValueError("InMemoryEnrollmentSessionRegistry requires non-empty session_key")
        return RegisteredEnrollmentSessionStore(registry=self, session_key=normalized_key)

    def active_session_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    def get_value(self, *, session_key: str, key: str) -> str | None:
        with self._lock:
            values = self._sessions.get(session_key)
            return None if values is None else values.get(key)

    def set_value(self, *, session_key: str, key: str, value: str) -> None:
        with self._lock:
            self._sessions.setdefault(session_key, {})[key] = value

    def pop_value(self, *, session_key: str, key: str) -> str | None:
        """
        Remove one key and evict the session entry once it holds no keys.

        Args:
            session_key: Normalized session key.
            key: Entry key.
        Returns:
            str | None: Removed value, `None` when absent.
        Assumptions:
            Take-and-remove happens under the registry lock.
        Raises:
            None.
        Side Effects:
            May drop the whole session entry.
        """
        with self._lock:
            values = self._sessions.get(session_key)
            if values is None:
                return None
            value = values.pop(key, None)
            if not values:
                del self._sessions[session_key]
            return value


class RegisteredEnrollmentSessionStore(EnrollmentSessionStore):
    """
    RegisteredEnrollmentSessionStore — session view delegating to a shared registry.

    Docs:
      - docs/architecture/two_factor/two-factor-totp-v1.md
    Related:
      - src/tfa/contexts/two_factor/application/ports/enrollment_session_store.py
    """

    def __init__(self, *, registry: InMemoryEnrollmentSessionRegistry, session_key: str) -> None:
        self._registry = registry
        self._session_key = session_key

    @property
    def session_key(self) -> str:
        return self._session_key

    def get(self, key: str) -> str | None:
        return self._registry.get_value(session_key=self._session_key, key=key)

    def set(self, key: str, value: str) -> None:
        self._registry.set_value(session_key=self._session_key, key=key, value=value)

    def delete(self, key: str) -> None:
        self.pop(key)

    def pop(self, key: str) -> str | None:
        return self._registry.pop_value(session_key=self._session_key, key=key)
