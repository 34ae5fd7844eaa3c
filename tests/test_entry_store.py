from datetime import date

from entries import normalize


def fields(day, start="09:00", end="17:00", site=None):
    raw = {"date": day, "startTime": start, "endTime": end}
    if site is not None:
        raw["siteLocation"] = site
    return normalize(raw)


def test_insert_assigns_id_and_timestamps(store):
    entry = store.insert(fields("2024-01-05", site="Harbour"))

    assert entry.id is not None
    assert entry.date == date(2024, 1, 5)
    assert entry.total_hours == 8.0
    assert entry.site_location == "Harbour"
    assert entry.created_at == entry.updated_at
    assert store.get(entry.id) == entry


def test_get_missing_returns_none(store):
    assert store.get(999) is None


def test_update_recomputes_fields_and_keeps_id(store):
    entry = store.insert(fields("2024-01-05"))

    updated = store.update(entry.id, fields("2024-02-04", start="22:00", end="06:00"))

    assert updated.id == entry.id
    assert updated.total_hours == 8.0
    assert updated.day == "Sunday"
    assert updated.month == "February"
    assert updated.created_at == entry.created_at
    assert store.query(year=2024, month="January") == []


def test_update_missing_returns_none(store):
    assert store.update(42, fields("2024-01-05")) is None


def test_delete(store):
    entry = store.insert(fields("2024-01-05"))

    assert store.delete(entry.id) is True
    assert store.get(entry.id) is None
    assert store.delete(entry.id) is False


def test_query_filters_by_period_in_ascending_date_order(store):
    store.insert(fields("2024-01-12"))
    store.insert(fields("2024-02-01"))
    store.insert(fields("2024-01-05"))
    store.insert(fields("2023-01-20"))

    january = store.query(year=2024, month="January")

    assert [e.date for e in january] == [date(2024, 1, 5), date(2024, 1, 12)]
    assert all(e.year == 2024 and e.month == "January" for e in january)
    assert [e.date.year for e in store.query(year=2023)] == [2023]
    assert len(store.query(month="January")) == 3
    assert len(store.query()) == 4


def test_list_all_is_newest_first(store):
    store.insert(fields("2024-01-05"))
    store.insert(fields("2024-03-01"))
    store.insert(fields("2024-02-10"))

    assert [e.date.isoformat() for e in store.list_all()] == [
        "2024-03-01",
        "2024-02-10",
        "2024-01-05",
    ]


def test_ping(store):
    assert store.ping() is True
