from __future__ import annotations

import threading
from datetime import timedelta

import pytest

from tfa.contexts.two_factor.adapters.outbound.persistence.in_memory import (
    InMemoryTwoFactorSettingsRepository,
)
from tfa.contexts.two_factor.adapters.outbound.session import (
    InMemoryEnrollmentSessionRegistry,
    InMemoryEnrollmentSessionStore,
)
from tfa.contexts.two_factor.adapters.outbound.time import SystemTwoFactorClock
from tfa.contexts.two_factor.application.ports import PENDING_SECRET_KEY
from tfa.contexts.two_factor.domain.entities import UserTfaSettings
from tfa.shared_kernel.primitives import UserId

_USER_ID = UserId.from_string("user-101")


def test_repository_read_returns_disabled_defaults_for_unknown_user() -> None:
    repository = InMemoryTwoFactorSettingsRepository()

    assert repository.read(user_id=_USER_ID) == UserTfaSettings.disabled()


def test_repository_write_replaces_record_and_drops_pending_code() -> None:
    """
    Verify write persists storage fields and never keeps the transient confirmation code.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Confirmation code belongs to one request only.
    Raises:
        AssertionError: If stored snapshot differs from expectation.
    Side Effects:
        None.
    """
    repository = InMemoryTwoFactorSettingsRepository()
    settings = UserTfaSettings(
        enabled=True,
        secret="SECRETVALUE",
        encrypted=False,
        timeslice=7,
        pending_confirm_code="123456",
    )

    stored = repository.write(user_id=_USER_ID, settings=settings)

    assert stored.pending_confirm_code == ""
    assert repository.read(user_id=_USER_ID) == stored
    assert repository.read(user_id=UserId.from_string("user-102")) == UserTfaSettings.disabled()


def test_repository_advance_timeslice_is_compare_and_set() -> None:
    repository = InMemoryTwoFactorSettingsRepository()
    repository.write(
        user_id=_USER_ID,
        settings=UserTfaSettings(enabled=True, secret="SECRETVALUE", timeslice=10),
    )

    assert repository.advance_timeslice(user_id=_USER_ID, expected=9, timeslice=12) is False
    assert repository.advance_timeslice(user_id=_USER_ID, expected=10, timeslice=10) is False
    assert repository.advance_timeslice(user_id=_USER_ID, expected=10, timeslice=12) is True
    assert repository.read(user_id=_USER_ID).timeslice == 12
    assert repository.advance_timeslice(user_id=_USER_ID, expected=10, timeslice=13) is False


def test_repository_advance_timeslice_rejects_missing_record() -> None:
    repository = InMemoryTwoFactorSettingsRepository()

    assert repository.advance_timeslice(user_id=_USER_ID, expected=0, timeslice=5) is False
    assert repository.read(user_id=_USER_ID) == UserTfaSettings.disabled()


def test_repository_lets_only_one_concurrent_advance_win() -> None:
    """
    Verify racing advances from the same observed watermark produce exactly one winner.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Threads start together through a barrier.
    Raises:
        AssertionError: If more or fewer than one advance succeeds.
    Side Effects:
        Starts and joins worker threads.
    """
    repository = InMemoryTwoFactorSettingsRepository()
    repository.write(
        user_id=_USER_ID,
        settings=UserTfaSettings(enabled=True, secret="SECRETVALUE", timeslice=100),
    )
    workers_count = 8
    barrier = threading.Barrier(workers_count)
    results: list[bool] = []
    results_lock = threading.Lock()

    def _advance() -> None:
        barrier.wait()
        outcome = repository.advance_timeslice(user_id=_USER_ID, expected=100, timeslice=101)
        with results_lock:
            results.append(outcome)

    threads = [threading.Thread(target=_advance) for _ in range(workers_count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count(True) == 1
    assert repository.read(user_id=_USER_ID).timeslice == 101


def test_session_store_get_set_delete() -> None:
    store = InMemoryEnrollmentSessionStore()

    assert store.get(PENDING_SECRET_KEY) is None
    store.set(PENDING_SECRET_KEY, "PENDING")
    assert store.get(PENDING_SECRET_KEY) == "PENDING"
    store.delete(PENDING_SECRET_KEY)
    store.delete(PENDING_SECRET_KEY)
    assert store.get(PENDING_SECRET_KEY) is None


def test_session_store_pop_returns_value_once() -> None:
    store = InMemoryEnrollmentSessionStore()
    store.set(PENDING_SECRET_KEY, "PENDING")

    assert store.pop(PENDING_SECRET_KEY) == "PENDING"
    assert store.pop(PENDING_SECRET_KEY) is None


def test_session_registry_isolates_sessions_and_shares_state_per_key() -> None:
    registry = InMemoryEnrollmentSessionRegistry()

    first = registry.for_session("user-101")
    first.set(PENDING_SECRET_KEY, "PENDING")

    assert registry.for_session(" user-101 ").get(PENDING_SECRET_KEY) == "PENDING"
    assert registry.for_session("user-101").session_key == "user-101"
    assert registry.for_session("user-102").get(PENDING_SECRET_KEY) is None

    with pytest.raises(ValueError):
        registry.for_session("  ")


def test_session_registry_evicts_session_after_last_key_is_removed() -> None:
    registry = InMemoryEnrollmentSessionRegistry()
    store = registry.for_session("user-101")

    store.set(PENDING_SECRET_KEY, "PENDING")
    registry.for_session("user-102").get(PENDING_SECRET_KEY)
    assert registry.active_session_count() == 1

    assert store.pop(PENDING_SECRET_KEY) == "PENDING"
    assert registry.active_session_count() == 0

    store.set(PENDING_SECRET_KEY, "NEXT")
    store.delete(PENDING_SECRET_KEY)
    assert registry.active_session_count() == 0
    assert store.get(PENDING_SECRET_KEY) is None


def test_session_registry_pop_hands_pending_value_to_one_caller() -> None:
    """
    Verify concurrent pops of one pending value yield it exactly once.

    Args:
        None.
    Returns:
        None.
    Assumptions:
        Threads start together through a barrier.
    Raises:
        AssertionError: If the value is taken more or fewer than once.
    Side Effects:
        Starts and joins worker threads.
    """
    registry = InMemoryEnrollmentSessionRegistry()
    registry.for_session("user-101").set(PENDING_SECRET_KEY, "PENDING")
    workers_count = 8
    barrier = threading.Barrier(workers_count)
    taken: list[str | None] = []
    taken_lock = threading.Lock()

    def _take() -> None:
        barrier.wait()
        value = registry.for_session("user-101").pop(PENDING_SECRET_KEY)
        with taken_lock:
            taken.append(value)

    threads = [threading.Thread(target=_take) for _ in range(workers_count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert taken.count("PENDING") == 1
    assert taken.count(None) == workers_count - 1
    assert registry.active_session_count() == 0


def test_system_clock_returns_aware_utc_datetime() -> None:
    now = SystemTwoFactorClock().now()

    assert now.utcoffset() == timedelta(0)
