from datetime import datetime, timedelta

import pytest

from core.errors import ComplaintNotFound
from grievance.records import complaint_to_dict, new_complaint

T0 = datetime(2026, 1, 10, 12, 0)


def _add(repository, minutes=0, **overrides):
    fields = dict(
        submitter_id="citizen-1",
        contact_name="Sunita Devi",
        contact_mobile="9123456780",
        area_code="560001",
        source_language="en",
        original_text="No water",
        normalized_text="No water",
        category="Water Supply",
        department="Water Supply Department",
        now=T0 + timedelta(minutes=minutes),
    )
    fields.update(overrides)
    return repository.create(new_complaint(**fields))


def test_new_complaint_has_first_history_entry():
    complaint = new_complaint(
        submitter_id="citizen-9",
        contact_name="A",
        contact_mobile="9000000000",
        area_code="411001",
        source_language="mr",
        original_text="पाणी नाही",
        normalized_text="No water",
        category="Water Supply",
        department="Water Supply Department",
        now=T0,
    )

    assert complaint.id
    assert complaint.status == "Submitted"
    assert len(complaint.status_history) == 1
    assert complaint.status_history[0].status == "Submitted"
    assert complaint.status_history[0].changed_at == T0


def test_ids_are_unique(repository):
    ids = {_add(repository, minutes=i).id for i in range(5)}
    assert len(ids) == 5


def test_get_round_trips_fields(repository):
    created = _add(repository, attachment_ref="uploads/a.jpg")

    data = complaint_to_dict(repository.get(created.id))

    assert data["area_code"] == "560001"
    assert data["attachment_ref"] == "uploads/a.jpg"
    assert data["status_history"] == [
        {"status": "Submitted", "timestamp": T0.isoformat(), "actor_id": None, "remarks": None}
    ]


def test_get_unknown_id(repository):
    with pytest.raises(ComplaintNotFound):
        repository.get("missing")


def test_list_for_submitter_newest_first(repository):
    older = _add(repository, minutes=0)
    newer = _add(repository, minutes=5)
    _add(repository, minutes=10, submitter_id="someone-else")

    mine = repository.list_for_submitter("citizen-1")

    assert [c.id for c in mine] == [newer.id, older.id]


def test_search_filters_combine(repository):
    water = _add(repository, minutes=0)
    _add(
        repository,
        minutes=1,
        category="Electricity",
        department="Electricity Board",
        area_code="560002",
    )
    _add(repository, minutes=2, area_code="560002")

    assert len(repository.search()) == 3
    assert len(repository.search(category="Water Supply")) == 2
    assert [c.id for c in repository.search(category="Water Supply", area_code="560001")] == [water.id]
    assert repository.search(department="Electricity Board")[0].category == "Electricity"
    assert repository.search(status="Resolved") == []


def test_stats_zero_fill_and_grouping(repository):
    assert repository.stats() == {
        "total": 0,
        "by_status": {"Submitted": 0, "Under Review": 0, "In Progress": 0, "Resolved": 0},
        "by_category": [],
        "by_department": [],
        "by_area_code": [],
    }

    _add(repository, minutes=0)
    _add(repository, minutes=1)
    _add(repository, minutes=2, category="Housing", department="Housing Department", area_code="560009")

    stats = repository.stats()

    assert stats["total"] == 3
    assert stats["by_status"]["Submitted"] == 3
    assert stats["by_status"]["Resolved"] == 0
    assert stats["by_category"] == [
        {"value": "Water Supply", "count": 2},
        {"value": "Housing", "count": 1},
    ]
    assert stats["by_area_code"][0] == {"value": "560001", "count": 2}


def test_stats_limits_area_codes(repository):
    for i in range(4):
        _add(repository, minutes=i, area_code=f"56000{i}")

    assert len(repository.stats(top_areas=2)["by_area_code"]) == 2
