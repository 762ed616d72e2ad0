import pytest

from classboard.core.exceptions import NotFoundError
from classboard.services.aggregator import ScheduleAggregator

SUNDAY, MONDAY, WEDNESDAY = 0, 1, 3
TODAY = "2030-01-10"


@pytest.fixture
def aggregator(store):
    return ScheduleAggregator(store)


def add_exception(store, schedule, date):
    return store.create_exception(
        schedule_id=schedule.id,
        date=date,
        start_time=schedule.start_time,
        end_time=schedule.end_time,
        cancelled=True,
        created_date="2030-01-01",
    )


def test_stats_counts_schedules_and_upcoming_exceptions(aggregator, store, school_class, add_schedule):
    monday = add_schedule(school_class.id, MONDAY, "09:00", "10:00")
    wednesday = add_schedule(school_class.id, WEDNESDAY, "09:00", "10:00")
    add_exception(store, monday, "2030-01-14")
    add_exception(store, monday, "2030-01-21")
    add_exception(store, wednesday, "2030-01-16")

    stats = aggregator.stats(school_class.id, today=TODAY)

    assert stats.total_schedules == 2
    assert stats.schedules_by_day == {
        "Sunday": 0,
        "Monday": 1,
        "Tuesday": 0,
        "Wednesday": 1,
        "Thursday": 0,
        "Friday": 0,
        "Saturday": 0,
    }
    assert stats.total_exceptions == 3
    assert stats.upcoming_exceptions == 3


def test_stats_treats_today_as_upcoming_and_past_as_not(aggregator, store, school_class, add_schedule):
    monday = add_schedule(school_class.id, MONDAY, "09:00", "10:00")
    add_exception(store, monday, "2030-01-09")
    add_exception(store, monday, TODAY)

    stats = aggregator.stats(school_class.id, today=TODAY)

    assert stats.total_exceptions == 2
    assert stats.upcoming_exceptions == 1


def test_stats_for_empty_class(aggregator, school_class):
    stats = aggregator.stats(school_class.id)

    assert stats.total_schedules == 0
    assert set(stats.schedules_by_day.values()) == {0}
    assert stats.total_exceptions == 0


def test_weekly_overview_buckets_and_sorts(aggregator, school_class, add_schedule):
    add_schedule(school_class.id, MONDAY, "14:00", "15:00")
    add_schedule(school_class.id, MONDAY, "09:00", "10:00")
    add_schedule(school_class.id, SUNDAY, "18:00", "19:00")

    overview = aggregator.weekly_overview(school_class.id)

    assert list(overview) == ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]
    assert [s.start_time for s in overview["Monday"]] == ["09:00", "14:00"]
    assert [s.start_time for s in overview["Sunday"]] == ["18:00"]
    assert overview["Friday"] == []


def test_unknown_class_fails(aggregator):
    with pytest.raises(NotFoundError):
        aggregator.weekly_overview("missing")
    with pytest.raises(NotFoundError):
        aggregator.stats("missing")
