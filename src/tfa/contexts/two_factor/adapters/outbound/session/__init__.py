from .in_memory_enrollment_session_store import (
    InMemoryEnrollmentSessionRegistry,
    InMemoryEnrollmentSessionStore,
    RegisteredEnrollmentSessionStore,
)

__all__ = [
    "InMemoryEnrollmentSessionRegistry",
    "InMemoryEnrollmentSessionStore",
    "RegisteredEnrollmentSessionStore",
]
