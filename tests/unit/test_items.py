"""
Unit tests for TimelineItem, LanedItem and record coercion.
"""

from datetime import date, datetime

import pytest

from timelane.core.items import LanedItem, TimelineItem, coerce_item


class SlashDateUtility:
    """Parses DD/MM/YYYY strings."""

    def parse(self, value):
        try:
            day, month, year = (int(part) for part in value.split("/"))
            return date(year, month, day)
        except (AttributeError, ValueError):
            return None

    def format(self, value):
        return value.strftime("%d/%m/%Y")

    def day_difference(self, later, earlier):
        return (later - earlier).days


class TestTimelineItemFromDict:
    def test_camel_case_record(self):
        item = TimelineItem.from_dict(
            {
                "id": 1,
                "name": "Design Phase",
                "startDate": "2025-01-18",
                "endDate": "2025-02-05",
                "color": "#10b981",
            }
        )

        assert item.id == 1
        assert item.name == "Design Phase"
        assert item.start_date == date(2025, 1, 18)
        assert item.end_date == date(2025, 2, 5)
        assert item.color == "#10b981"
        assert item.extra == {}

    def test_snake_case_record(self):
        item = TimelineItem.from_dict(
            {"id": "a", "name": "A", "start_date": "2025-01-01", "end_date": "2025-01-02"}
        )
        assert item.start_date == date(2025, 1, 1)
        assert item.end_date == date(2025, 1, 2)

    def test_unknown_fields_kept_and_lane_dropped(self):
        item = TimelineItem.from_dict(
            {
                "id": 3,
                "name": "QA",
                "startDate": "2025-02-25",
                "endDate": "2025-03-10",
                "owner": "team-b",
                "lane": 4,
            }
        )
        assert item.extra == {"owner": "team-b"}
        assert "lane" not in item.to_dict()

    def test_missing_name_becomes_empty(self):
        item = TimelineItem.from_dict(
            {"id": 1, "startDate": "2025-01-01", "endDate": "2025-01-01"}
        )
        assert item.name == ""

    def test_missing_id_raises(self):
        with pytest.raises(KeyError):
            TimelineItem.from_dict({"name": "x", "startDate": "2025-01-01", "endDate": "2025-01-02"})

    def test_inverted_range_raises(self):
        with pytest.raises(ValueError):
            TimelineItem.from_dict(
                {"id": 1, "startDate": "2025-01-05", "endDate": "2025-01-01"}
            )

    def test_invalid_date_raises(self):
        with pytest.raises(ValueError):
            TimelineItem.from_dict({"id": 1, "startDate": "2025-02-30", "endDate": "2025-03-01"})

    def test_custom_date_utility(self):
        item = TimelineItem.from_dict(
            {"id": 1, "startDate": "05/01/2025", "endDate": "07/01/2025"},
            date_utility=SlashDateUtility(),
        )
        assert item.start_date == date(2025, 1, 5)
        assert item.end_date == date(2025, 1, 7)


def test_to_dict_uses_host_field_names():
    item = TimelineItem(
        id=7,
        name="Beta Release",
        start_date=date(2025, 3, 11),
        end_date=date(2025, 3, 11),
        color="#ec4899",
        extra={"owner": "ops"},
    )

    assert item.to_dict() == {
        "id": 7,
        "name": "Beta Release",
        "startDate": "2025-03-11",
        "endDate": "2025-03-11",
        "color": "#ec4899",
        "owner": "ops",
    }


def test_duration_and_with_dates():
    item = TimelineItem(id=1, name="A", start_date=date(2025, 1, 1), end_date=date(2025, 1, 5))

    assert item.duration_days == 5
    moved = item.with_dates(date(2025, 1, 4), date(2025, 1, 8))
    assert moved.id == 1
    assert moved.name == "A"
    assert (moved.start_date, moved.end_date) == (date(2025, 1, 4), date(2025, 1, 8))
    # Original is untouched
    assert item.start_date == date(2025, 1, 1)


def test_laned_item_delegates_and_serializes_lane():
    item = TimelineItem(id=2, name="B", start_date=date(2025, 1, 3), end_date=date(2025, 1, 4))
    laned = LanedItem(item=item, lane=3)

    assert laned.id == 2
    assert laned.name == "B"
    assert laned.start_date == date(2025, 1, 3)
    assert laned.end_date == date(2025, 1, 4)
    assert laned.color is None
    assert laned.to_dict()["lane"] == 3


class TestCoerceItem:
    def test_passes_valid_items_through(self):
        item = TimelineItem(id=1, name="A", start_date=date(2025, 1, 1), end_date=date(2025, 1, 2))
        assert coerce_item(item) is item

    def test_rejects_inverted_item_instance(self):
        item = TimelineItem(id=1, name="A", start_date=date(2025, 1, 2), end_date=date(2025, 1, 1))
        assert coerce_item(item) is None

    @pytest.mark.parametrize(
        "fields",
        [
            {"id": None, "start_date": date(2025, 1, 1), "end_date": date(2025, 1, 2)},
            {"id": 1, "start_date": "2025-01-01", "end_date": date(2025, 1, 2)},
            {"id": 1, "start_date": date(2025, 1, 1), "end_date": None},
            {"id": 1, "start_date": datetime(2025, 1, 1, 9), "end_date": date(2025, 1, 2)},
        ],
    )
    def test_rejects_malformed_item_instance(self, fields):
        assert coerce_item(TimelineItem(name="A", **fields)) is None

    @pytest.mark.parametrize(
        "record",
        [
            None,
            "2025-01-01",
            42,
            {},
            {"id": 1},
            {"id": None, "startDate": "2025-01-01", "endDate": "2025-01-02"},
            {"id": 1, "startDate": None, "endDate": "2025-01-02"},
            {"id": 1, "startDate": "2025-01-03", "endDate": "2025-01-02"},
            {"id": 1, "startDate": 12, "endDate": "2025-01-02"},
        ],
    )
    def test_malformed_records_return_none(self, record):
        assert coerce_item(record) is None
