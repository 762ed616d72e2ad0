import pytest

from classboard.core.exceptions import ConflictError, NotFoundError
from classboard.services.conflict_detector import ScheduleCandidate
from classboard.services.schedule_manager import ScheduleManager

MONDAY = 1
TUESDAY = 2


@pytest.fixture
def manager(store):
    return ScheduleManager(store)


def slot(school_class, day, start, end):
    return ScheduleCandidate(school_class.id, day, start, end)


def test_later_overlapping_item_is_skipped(manager, store, school_class):
    a = slot(school_class, MONDAY, "09:00", "10:00")
    b = slot(school_class, MONDAY, "09:30", "10:30")
    c = slot(school_class, TUESDAY, "09:00", "10:00")

    outcome = manager.create_bulk([a, b, c])

    assert [(s.day_of_week, s.start_time) for s in outcome.created] == [(MONDAY, "09:00"), (TUESDAY, "09:00")]
    assert [(item.index, item.reason) for item in outcome.skipped] == [
        (2, "Conflicts with schedule 1 in this bulk operation"),
    ]
    assert len(store.list_class_schedules(school_class.id)) == 2


def test_skipped_item_does_not_block_later_items(manager, school_class):
    a = slot(school_class, MONDAY, "09:00", "10:00")
    b = slot(school_class, MONDAY, "09:30", "10:30")
    c = slot(school_class, MONDAY, "10:00", "11:00")  # overlaps only the skipped item

    outcome = manager.create_bulk([a, b, c])

    assert [s.start_time for s in outcome.created] == ["09:00", "10:00"]
    assert [item.index for item in outcome.skipped] == [2]


def test_in_batch_reason_names_the_accepted_position(manager, school_class, add_schedule):
    add_schedule(school_class.id, MONDAY, "08:00", "09:00")
    items = [
        slot(school_class, MONDAY, "08:30", "09:30"),  # stored conflict, skipped
        slot(school_class, MONDAY, "10:00", "11:00"),
        slot(school_class, MONDAY, "10:30", "11:30"),
    ]

    outcome = manager.create_bulk(items)

    assert [(item.index, item.reason) for item in outcome.skipped] == [
        (1, "Schedule conflicts with existing schedule on Monday from 08:00 to 09:00"),
        (3, "Conflicts with schedule 2 in this bulk operation"),
    ]


def test_mutually_overlapping_pair_keeps_the_earlier_item(manager, school_class):
    outcome = manager.create_bulk([
        slot(school_class, MONDAY, "09:00", "10:00"),
        slot(school_class, MONDAY, "09:00", "10:00"),
    ])

    assert len(outcome.created) == 1
    assert [item.index for item in outcome.skipped] == [2]


def test_all_items_skipped_raises_single_conflict(manager, store, school_class, add_schedule):
    add_schedule(school_class.id, MONDAY, "09:00", "11:00")

    with pytest.raises(ConflictError) as exc_info:
        manager.create_bulk([
            slot(school_class, MONDAY, "09:00", "10:00"),
            slot(school_class, MONDAY, "10:00", "11:00"),
        ])

    message = exc_info.value.message
    assert message.startswith("All schedules have conflicts: Schedule 1: ")
    assert "; Schedule 2: " in message
    assert [item["index"] for item in exc_info.value.details["skipped"]] == [1, 2]
    assert len(store.list_class_schedules(school_class.id)) == 1


def test_invalid_item_is_skipped(manager, school_class):
    outcome = manager.create_bulk([
        slot(school_class, MONDAY, "11:00", "10:00"),
        slot(school_class, MONDAY, "11:00", "12:00"),
    ])

    assert len(outcome.created) == 1
    assert outcome.skipped[0].index == 1
    assert outcome.skipped[0].reason.startswith("Invalid time range 11:00-10:00")


def test_storage_failure_on_one_item_is_reported(manager, school_class, monkeypatch):
    original = manager.store.create_schedule
    calls = {"count": 0}

    def flaky(**kwargs):
        calls["count"] += 1
        if calls["count"] == 1:
            raise RuntimeError("connection reset")
        return original(**kwargs)

    monkeypatch.setattr(manager.store, "create_schedule", flaky)

    outcome = manager.create_bulk([
        slot(school_class, MONDAY, "09:00", "10:00"),
        slot(school_class, MONDAY, "09:30", "10:30"),
    ])

    # The failed first item was never accepted, so the second does not conflict with it.
    assert [s.start_time for s in outcome.created] == ["09:30"]
    assert [(item.index, item.reason) for item in outcome.skipped] == [
        (1, "Failed to create - connection reset"),
    ]


def test_unknown_class_fails_before_any_write(manager, store, school_class):
    with pytest.raises(NotFoundError):
        manager.create_bulk([
            slot(school_class, MONDAY, "09:00", "10:00"),
            ScheduleCandidate("missing", MONDAY, "11:00", "12:00"),
        ])

    assert store.list_class_schedules(school_class.id) == []
