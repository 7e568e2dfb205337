import pytest

from app.domain.exceptions import MalformedDraftError


def test_load_without_draft(draft_repo):
    assert draft_repo.load() is None


def test_save_load_clear(draft_repo):
    draft_repo.save({"meta_date": "2024-03-01", "nutrient": []})
    assert draft_repo.load() == {"meta_date": "2024-03-01", "nutrient": []}
    draft_repo.clear()
    assert draft_repo.load() is None


@pytest.mark.parametrize("raw", ["{oops", "[1, 2]", '"text"'])
def test_unreadable_draft(draft_repo, kv_store, raw):
    kv_store.set_item("greenhouse-log", raw)
    with pytest.raises(MalformedDraftError):
        draft_repo.load()
