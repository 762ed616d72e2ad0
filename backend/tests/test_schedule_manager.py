import pytest

from classboard.core.exceptions import ConflictError, DatabaseError, NotFoundError
from classboard.services.conflict_detector import ScheduleCandidate
from classboard.services.schedule_manager import ScheduleManager

MONDAY = 1
WEDNESDAY = 3


@pytest.fixture
def manager(store):
    return ScheduleManager(store)


def test_create_schedule(manager, school_class):
    schedule = manager.create(ScheduleCandidate(school_class.id, MONDAY, "09:00", "10:00"))

    assert schedule.id
    assert schedule.class_id == school_class.id
    assert (schedule.day_of_week, schedule.start_time, schedule.end_time) == (MONDAY, "09:00", "10:00")


def test_create_overlapping_schedule_fails(manager, school_class, add_schedule):
    add_schedule(school_class.id, MONDAY, "09:00", "10:00")

    with pytest.raises(ConflictError) as exc_info:
        manager.create(ScheduleCandidate(school_class.id, MONDAY, "09:30", "10:30"))

    assert exc_info.value.status_code == 409
    assert exc_info.value.message == (
        "Schedule conflicts detected: "
        "Schedule conflicts with existing schedule on Monday from 09:00 to 10:00"
    )


def test_create_back_to_back_schedule_is_allowed(manager, school_class, add_schedule):
    add_schedule(school_class.id, MONDAY, "09:00", "10:00")

    schedule = manager.create(ScheduleCandidate(school_class.id, MONDAY, "10:00", "11:00"))

    assert schedule.start_time == "10:00"


def test_create_for_unknown_class_fails(manager):
    with pytest.raises(NotFoundError, match="Class not found"):
        manager.create(ScheduleCandidate("missing", MONDAY, "09:00", "10:00"))


def test_storage_failure_is_wrapped(manager, school_class, monkeypatch):
    def broken(**_kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(manager.store, "create_schedule", broken)

    with pytest.raises(DatabaseError) as exc_info:
        manager.create(ScheduleCandidate(school_class.id, MONDAY, "09:00", "10:00"))

    assert exc_info.value.message == "Failed to create schedule"
    assert isinstance(exc_info.value.cause, RuntimeError)


def test_update_end_time_does_not_conflict_with_itself(manager, school_class, add_schedule):
    schedule = add_schedule(school_class.id, MONDAY, "09:00", "10:00")
    add_schedule(school_class.id, MONDAY, "11:00", "12:00")

    updated = manager.update(schedule.id, {"end_time": "10:30"})

    assert updated.start_time == "09:00"
    assert updated.end_time == "10:30"


def test_update_into_overlap_fails(manager, school_class, add_schedule):
    schedule = add_schedule(school_class.id, MONDAY, "09:00", "10:00")
    add_schedule(school_class.id, WEDNESDAY, "09:00", "10:00")

    with pytest.raises(ConflictError, match="on Wednesday from 09:00 to 10:00"):
        manager.update(schedule.id, {"day_of_week": WEDNESDAY})

    assert manager.get(schedule.id).day_of_week == MONDAY


def test_update_with_no_changes_returns_current_record(manager, school_class, add_schedule):
    schedule = add_schedule(school_class.id, MONDAY, "09:00", "10:00")

    unchanged = manager.update(schedule.id, {})

    assert unchanged.id == schedule.id
    assert unchanged.end_time == "10:00"


def test_update_unknown_schedule_fails(manager):
    with pytest.raises(NotFoundError, match="Schedule not found"):
        manager.update("missing", {"end_time": "10:30"})


def test_delete_schedule_removes_its_exceptions(manager, store, school_class, add_schedule):
    schedule = add_schedule(school_class.id, MONDAY, "09:00", "10:00")
    exception = store.create_exception(
        schedule_id=schedule.id,
        date="2030-01-07",
        start_time="10:00",
        end_time="11:00",
        cancelled=False,
        created_date="2026-01-05",
    )
    schedule_id, exception_id = schedule.id, exception.id

    manager.delete(schedule_id)

    assert store.get_schedule(schedule_id) is None
    assert store.get_exception(exception_id) is None
    with pytest.raises(NotFoundError):
        manager.delete(schedule_id)


def test_get_includes_exceptions_ordered_by_date(manager, store, school_class, add_schedule):
    schedule = add_schedule(school_class.id, MONDAY, "09:00", "10:00")
    for date in ("2030-03-04", "2030-01-07"):
        store.create_exception(
            schedule_id=schedule.id,
            date=date,
            start_time="09:00",
            end_time="10:00",
            cancelled=True,
            created_date="2026-01-05",
        )

    fetched = manager.get(schedule.id)

    assert [item.date for item in fetched.exceptions] == ["2030-01-07", "2030-03-04"]


def test_list_for_class_paginates(manager, school_class, add_schedule):
    add_schedule(school_class.id, WEDNESDAY, "09:00", "10:00")
    add_schedule(school_class.id, MONDAY, "14:00", "15:00")
    add_schedule(school_class.id, MONDAY, "09:00", "10:00")

    first = manager.list_for_class(school_class.id, page=1, limit=2)

    assert [(item.day_of_week, item.start_time) for item in first.data] == [(MONDAY, "09:00"), (MONDAY, "14:00")]
    assert first.pagination.model_dump() == {
        "page": 1,
        "limit": 2,
        "total": 3,
        "total_pages": 2,
        "has_next_page": True,
        "has_previous_page": False,
    }

    second = manager.list_for_class(school_class.id, page=2, limit=2)
    assert [item.day_of_week for item in second.data] == [WEDNESDAY]
    assert second.pagination.has_next_page is False
    assert second.pagination.has_previous_page is True


def test_list_for_class_clamps_page_and_limit(manager, school_class, add_schedule):
    add_schedule(school_class.id, MONDAY, "09:00", "10:00")

    result = manager.list_for_class(school_class.id, page=0, limit=500)
    assert result.pagination.page == 1
    assert result.pagination.limit == 50

    result = manager.list_for_class(school_class.id, limit=0)
    assert result.pagination.limit == 1

    assert manager.list_for_class(school_class.id).pagination.limit == 10


def test_list_for_class_filters_by_day_and_search(manager, school_class, add_schedule):
    add_schedule(school_class.id, MONDAY, "09:00", "10:00")
    add_schedule(school_class.id, MONDAY, "14:00", "15:00")
    add_schedule(school_class.id, WEDNESDAY, "14:00", "15:30")

    by_day = manager.list_for_class(school_class.id, day_of_week=WEDNESDAY)
    assert [item.end_time for item in by_day.data] == ["15:30"]

    by_search = manager.list_for_class(school_class.id, search="14:")
    assert by_search.pagination.total == 2

    empty = manager.list_for_class(school_class.id, search="%")
    assert empty.pagination.total == 0
    assert empty.pagination.total_pages == 0


def test_list_for_unknown_class_fails(manager):
    with pytest.raises(NotFoundError):
        manager.list_for_class("missing")
