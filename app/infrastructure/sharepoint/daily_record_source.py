"""
Daily record source backed by the SharePoint daily record list.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence

from app.domain.models import DailyRecord, UserDailyRecords
from app.infrastructure.sharepoint.filters import build_daily_record_filter

logger = logging.getLogger(__name__)

DAILY_SELECT_FIELDS = (
    "Id",
    "RecordDate",
    "Completed",
    "HasSpecialNotes",
    "HasIncidents",
    "IsEmpty",
    "UserLookup/UserCode",
    "UserLookup/Title",
)


class ListItemReader(Protocol):
    async def list_items(
        self,
        list_name: str,
        filter_query: str = "",
        select: Sequence[str] = (),
        expand: Sequence[str] = (),
        top: int = 500,
    ) -> List[Dict[str, Any]]:
        ...


def from_daily_item(item: Dict[str, Any]) -> DailyRecord:
    user = item.get("UserLookup") or {}
    return DailyRecord(
        id=str(item.get("Id", "")),
        user_id=user.get("UserCode") or "",
        user_name=user.get("Title") or "",
        record_date=(item.get("RecordDate") or "")[:10],
        completed=bool(item.get("Completed")),
        has_special_notes=bool(item.get("HasSpecialNotes")),
        has_incidents=bool(item.get("HasIncidents")),
        is_empty=bool(item.get("IsEmpty")),
    )


def group_by_user(records: Iterable[DailyRecord]) -> List[UserDailyRecords]:
    """
    Group records per user, keeping first-seen order.

    Records without a user code are dropped; they cannot be keyed.
    """
    grouped: Dict[str, List[DailyRecord]] = {}
    names: Dict[str, str] = {}
    orphaned: List[str] = []
    for record in records:
        if not record.user_id:
            orphaned.append(record.id)
            continue
        if record.user_id not in grouped:
            grouped[record.user_id] = []
            names[record.user_id] = record.user_name
        grouped[record.user_id].append(record)

    if orphaned:
        logger.warning(
            "DAILY_RECORDS_WITHOUT_USER | count=%s | ids=%s",
            len(orphaned), ",".join(orphaned),
        )

    return [
        UserDailyRecords(
            user_id=user_id,
            display_name=names[user_id],
            daily_records=tuple(items),
        )
        for user_id, items in grouped.items()
    ]


class SharePointDailyRecordSource:
    """Loads one month of daily records from SharePoint"""

    def __init__(self, client: ListItemReader, list_name: str):
        self.client = client
        self.list_name = list_name

    async def load_month(
        self,
        year_month: str,
        user_ids: Optional[Sequence[str]] = None,
    ) -> List[DailyRecord]:
        filter_query = build_daily_record_filter(year_month, user_ids=user_ids)
        items = await self.client.list_items(
            self.list_name,
            filter_query=filter_query,
            select=DAILY_SELECT_FIELDS,
            expand=("UserLookup",),
        )
        records = [from_daily_item(item) for item in items]
        logger.info(f"Loaded {len(records)} daily records for {year_month}")
        return records
