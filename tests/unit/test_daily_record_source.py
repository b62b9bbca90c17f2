import logging
from typing import Any, Dict, List

import pytest

from app.domain.models import DailyRecord
from app.infrastructure.sharepoint.daily_record_source import (
    DAILY_SELECT_FIELDS,
    SharePointDailyRecordSource,
    from_daily_item,
    group_by_user,
)


class MockListReader:
    """Mock list reader returning canned items"""

    def __init__(self, items: List[Dict[str, Any]]):
        self.items = items
        self.calls: List[Dict[str, Any]] = []

    async def list_items(self, list_name, filter_query="", select=(), expand=(), top=500):
        self.calls.append({
            "list_name": list_name,
            "filter_query": filter_query,
            "select": select,
            "expand": expand,
        })
        return self.items


def daily_item(item_id, user_code, title, date, **flags):
    return {
        "Id": item_id,
        "RecordDate": f"{date}T00:00:00Z",
        "UserLookup": {"UserCode": user_code, "Title": title},
        **flags,
    }


def test_from_daily_item():
    record = from_daily_item(
        daily_item(5, "USER001", "Taro Yamada", "2024-11-05", Completed=True, HasIncidents=1)
    )

    assert record == DailyRecord(
        id="5",
        user_id="USER001",
        user_name="Taro Yamada",
        record_date="2024-11-05",
        completed=True,
        has_special_notes=False,
        has_incidents=True,
        is_empty=False,
    )


def test_from_daily_item_tolerates_missing_lookup():
    record = from_daily_item({"Id": 9, "RecordDate": None, "UserLookup": None})

    assert record.user_id == ""
    assert record.user_name == ""
    assert record.record_date == ""


def test_group_by_user_keeps_first_seen_order():
    records = [
        from_daily_item(daily_item(1, "USER002", "Hanako Sato", "2024-11-01")),
        from_daily_item(daily_item(2, "USER001", "Taro Yamada", "2024-11-01")),
        from_daily_item(daily_item(3, "USER002", "Hanako S.", "2024-11-02")),
    ]

    groups = group_by_user(records)

    assert [g.user_id for g in groups] == ["USER002", "USER001"]
    assert groups[0].display_name == "Hanako Sato"
    assert [r.id for r in groups[0].daily_records] == ["1", "3"]
    assert len(groups[1].daily_records) == 1


def test_group_by_user_empty():
    assert group_by_user([]) == []


def test_group_by_user_drops_records_without_user(caplog):
    records = [
        from_daily_item({"Id": 8, "RecordDate": "2024-11-04T00:00:00Z", "UserLookup": None, "Completed": True}),
        from_daily_item(daily_item(9, "USER001", "Taro Yamada", "2024-11-04")),
    ]

    with caplog.at_level(logging.WARNING):
        groups = group_by_user(records)

    assert [g.user_id for g in groups] == ["USER001"]
    assert [r.id for r in groups[0].daily_records] == ["9"]
    assert "DAILY_RECORDS_WITHOUT_USER" in caplog.text


@pytest.mark.asyncio
async def test_load_month_queries_month_range():
    reader = MockListReader([
        daily_item(1, "USER001", "Taro Yamada", "2024-11-01", Completed=True),
        daily_item(2, "USER001", "Taro Yamada", "2024-11-02", IsEmpty=True),
    ])
    source = SharePointDailyRecordSource(reader, "SupportRecord_Daily")

    records = await source.load_month("2024-11", user_ids=["USER001"])

    assert [r.record_date for r in records] == ["2024-11-01", "2024-11-02"]
    assert records[0].completed is True
    assert records[1].is_empty is True

    call = reader.calls[0]
    assert call["list_name"] == "SupportRecord_Daily"
    assert call["filter_query"] == (
        "(RecordDate ge datetime'2024-11-01T00:00:00.000Z') and "
        "(RecordDate lt datetime'2024-12-01T00:00:00.000Z') and "
        "(UserLookup/UserCode eq 'USER001')"
    )
    assert call["select"] == DAILY_SELECT_FIELDS
    assert call["expand"] == ("UserLookup",)
