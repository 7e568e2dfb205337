from app.domain.chronology import entry_date, entry_sort_key, sort_chronologically, sort_history


def test_entry_date_prefers_business_date(make_entry):
    assert entry_date(make_entry("2024-03-01")) == "2024-03-01"


def test_entry_date_falls_back_to_created_at(make_entry):
    entry = make_entry("", created_at="2024-03-04T10:00:00.000Z")
    assert entry_date(entry) == "2024-03-04T10:00:00.000Z"
    assert entry_sort_key(entry) == "2024-03-04T10:00:00.000Z"


def test_sort_chronologically_is_stable(make_entry):
    a = make_entry("2024-03-02", entry_id="a")
    b = make_entry("2024-03-01", entry_id="b")
    c = make_entry("2024-03-02", entry_id="c")
    assert [e.id for e in sort_chronologically([a, b, c])] == ["b", "a", "c"]


def test_sort_history_newest_save_first(make_entry):
    old = make_entry("2024-03-05", entry_id="old", updated_at="2024-03-05T08:00:00.000Z")
    new = make_entry("2024-03-01", entry_id="new", updated_at="2024-03-06T08:00:00.000Z")
    assert [e.id for e in sort_history([old, new])] == ["new", "old"]
