import threading
import time

import pytest

from classbook.exceptions import (
    ConfigurationMissingException,
    ConflictException,
    StoreIOException,
)
from classbook.models.attendance import AttendanceDocument
from classbook.services.attendance_service import AttendanceService, name_sort_key
from classbook.stores.local_store import LocalDocumentStore
from classbook.utils.cache import AttendanceCache
from tests.store_mocks import FakeRemoteStore

MONDAY = "2024-01-01"
TUESDAY = "2024-01-02"


@pytest.fixture
def remote_store():
    return FakeRemoteStore(version="sha-0")


@pytest.fixture
def service(app, remote_store):
    service = AttendanceService(remote_store)
    service.initialize()
    return service


def test_get_slot_never_written_returns_empty_list(service):
    assert service.get_slot(MONDAY, 1) == []


def test_save_then_get_slot_round_trip(service):
    marks = [{"name": "Bob", "present": True}, {"name": "Alice", "present": False}]

    service.save_slot(MONDAY, 3, marks)

    assert service.get_slot(MONDAY, 3) == marks
    assert service.get_slot(MONDAY, 4) == []


def test_save_slot_with_empty_list(service, remote_store):
    service.save_slot(MONDAY, 1, [])

    assert service.get_slot(MONDAY, 1) == []
    assert remote_store.document.attendance == {f"{MONDAY}_1": []}


def test_save_slot_records_new_version(service, remote_store):
    version = service.save_slot(MONDAY, 1, [{"name": "Alice", "present": True}])

    assert version == remote_store.version
    assert service.cache.version == version

    # The next save is based on the recorded version and succeeds
    service.save_slot(MONDAY, 2, [{"name": "Alice", "present": False}])
    assert set(remote_store.document.attendance) == {f"{MONDAY}_1", f"{MONDAY}_2"}


def test_save_slot_refreshes_before_writing(service, remote_store):
    remote_store.external_write(AttendanceDocument({f"{TUESDAY}_5": [{"name": "Carol", "present": True}]}))

    service.save_slot(MONDAY, 1, [{"name": "Alice", "present": True}])

    # The external change is kept, not overwritten
    assert remote_store.document.attendance[f"{TUESDAY}_5"] == [{"name": "Carol", "present": True}]
    assert service.get_slot(TUESDAY, 5) == [{"name": "Carol", "present": True}]


def test_conflict_is_reported_and_cache_keeps_unsaved_change(service, remote_store):
    marks = [{"name": "Alice", "present": True}]

    # Another writer lands between our refresh and our store
    remote_store.before_store = lambda: remote_store.external_write(AttendanceDocument.empty())

    with pytest.raises(ConflictException):
        service.save_slot(MONDAY, 1, marks)

    assert service.get_slot(MONDAY, 1) == marks
    assert remote_store.document.attendance == {}


def test_refresh_failure_still_attempts_write(service, remote_store):
    remote_store.fail_loads = True

    service.save_slot(MONDAY, 1, [{"name": "Alice", "present": True}])

    assert remote_store.store_calls == 1
    assert remote_store.document.attendance[f"{MONDAY}_1"] == [{"name": "Alice", "present": True}]


def test_save_slot_without_configuration_fails_fast(app):
    store = FakeRemoteStore(configured=False)
    service = AttendanceService(store)
    service.initialize()

    with pytest.raises(ConfigurationMissingException):
        service.save_slot(MONDAY, 1, [{"name": "Alice", "present": True}])

    assert store.load_calls == 0
    assert store.store_calls == 0
    assert service.get_slot(MONDAY, 1) == []


def test_initialize_failure_starts_empty(app):
    store = FakeRemoteStore(AttendanceDocument({f"{MONDAY}_1": [{"name": "Alice", "present": True}]}), "sha-1")
    store.fail_loads = True

    service = AttendanceService(store)
    service.initialize()

    assert service.cache.document == AttendanceDocument.empty()
    assert service.cache.version is None


def test_get_slot_catches_up_when_never_synced(app):
    store = FakeRemoteStore(AttendanceDocument({f"{MONDAY}_1": [{"name": "Alice", "present": True}]}), "sha-1")
    store.fail_loads = True
    service = AttendanceService(store)
    service.initialize()

    store.fail_loads = False

    assert service.get_slot(MONDAY, 1) == [{"name": "Alice", "present": True}]
    assert service.cache.is_synced


def test_get_slot_during_unsynced_save_keeps_saved_slot(app):
    store = FakeRemoteStore()
    service = AttendanceService(store)
    paused = threading.Event()
    resume = threading.Event()
    marks = [{"name": "Alice", "present": True}]

    def pause_store():
        paused.set()
        resume.wait(timeout=5)

    store.before_store = pause_store

    def save():
        with app.app_context():
            service.save_slot(MONDAY, 1, marks)

    saver = threading.Thread(target=save)
    saver.start()
    assert paused.wait(timeout=5)

    # The read during the save is answered from the cache, which holds the pending change
    assert service.get_slot(MONDAY, 1) == marks

    resume.set()
    saver.join()

    assert service.cache.version == "sha-1"
    assert service.get_slot(MONDAY, 1) == marks


def test_get_slot_does_not_reload_once_synced(service, remote_store):
    loads = remote_store.load_calls

    service.get_slot(MONDAY, 1)
    service.get_slot(MONDAY, 2)

    assert remote_store.load_calls == loads


def test_get_slot_swallows_refresh_failure(app):
    store = FakeRemoteStore()
    store.fail_loads = True
    service = AttendanceService(store)

    assert service.get_slot(MONDAY, 1) == []


def test_get_slot_returns_copies(service):
    service.save_slot(MONDAY, 1, [{"name": "Alice", "present": True}])

    service.get_slot(MONDAY, 1)[0]["present"] = False

    assert service.get_slot(MONDAY, 1) == [{"name": "Alice", "present": True}]


def test_local_store_write_failure_is_surfaced(app, tmp_path):
    blocker = tmp_path / "not-a-directory"
    blocker.write_text("", encoding="utf-8")
    service = AttendanceService(LocalDocumentStore({"LOCAL_STORE_PATH": str(blocker / "attendance.json")}))

    with pytest.raises(StoreIOException):
        service.save_slot(MONDAY, 1, [{"name": "Alice", "present": True}])

    # No rollback of the in-memory change
    assert service.get_slot(MONDAY, 1) == [{"name": "Alice", "present": True}]


def test_concurrent_saves_are_serialized(app, remote_store):
    service = AttendanceService(remote_store)
    service.initialize()
    active = []
    overlaps = []

    def slow_store():
        active.append(1)
        if len(active) > 1:
            overlaps.append(len(active))
        time.sleep(0.01)
        active.pop()

    remote_store.before_store = slow_store
    errors = []

    def save(period):
        with app.app_context():
            try:
                service.save_slot(MONDAY, period, [{"name": f"Student {period}", "present": True}])
            except Exception as e:
                errors.append(e)

    threads = [threading.Thread(target=save, args=(period,)) for period in range(1, 9)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert overlaps == []
    assert len(remote_store.document.attendance) == 8


def test_build_matrix_sorts_rows_by_name(service):
    service.save_slot(MONDAY, 1, [{"name": "Bob", "present": True}, {"name": "Alice", "present": False}])

    matrix = service.build_matrix([MONDAY])

    assert [row["name"] for row in matrix] == ["Alice", "Bob"]
    assert matrix[0]["slots"] == {"0_1": False}
    assert matrix[1]["slots"] == {"0_1": True}


def test_build_matrix_merges_slots_per_student(service):
    service.save_slot(MONDAY, 1, [{"name": "Alice", "present": True}])
    service.save_slot(MONDAY, 2, [{"name": "Alice", "present": False}])

    assert service.build_matrix([MONDAY]) == [{"name": "Alice", "slots": {"0_1": True, "0_2": False}}]


def test_build_matrix_uses_day_index_of_week_dates(service):
    service.save_slot(TUESDAY, 8, [{"name": "Alice", "present": True}])
    service.save_slot(MONDAY, 1, [{"name": "Alice", "present": True}])

    matrix = service.build_matrix([MONDAY, TUESDAY])

    assert matrix == [{"name": "Alice", "slots": {"0_1": True, "1_8": True}}]


def test_build_matrix_ignores_periods_outside_day_and_other_dates(service):
    service.save_slot(MONDAY, 9, [{"name": "Alice", "present": True}])
    service.save_slot("2024-01-08", 1, [{"name": "Bob", "present": True}])

    assert service.build_matrix([MONDAY, TUESDAY]) == []


def test_build_matrix_is_idempotent_and_read_only(service, remote_store):
    service.save_slot(MONDAY, 1, [{"name": "Alice", "present": True}])
    loads, stores = remote_store.load_calls, remote_store.store_calls

    first = service.build_matrix([MONDAY])
    second = service.build_matrix([MONDAY])

    assert first == second
    assert (remote_store.load_calls, remote_store.store_calls) == (loads, stores)


@pytest.mark.parametrize("week_dates", [None, "2024-01-01", 42, {"0": "2024-01-01"}])
def test_build_matrix_without_date_list_is_empty(service, week_dates):
    service.save_slot(MONDAY, 1, [{"name": "Alice", "present": True}])

    assert service.build_matrix(week_dates) == []


def test_name_sort_key_is_case_and_accent_insensitive():
    names = ["bob", "Émile", "Alice", "eve", "alice"]

    assert sorted(names, key=name_sort_key) == ["alice", "Alice", "bob", "Émile", "eve"]


def test_cache_snapshot_is_not_changed_by_later_writes():
    cache = AttendanceCache()
    before = cache.snapshot()

    cache.set_slot(f"{MONDAY}_1", [{"name": "Alice", "present": True}])

    assert before.document.attendance == {}
    assert cache.document.get_slot(f"{MONDAY}_1") == [{"name": "Alice", "present": True}]
