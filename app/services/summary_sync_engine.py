"""
SUMMARY SYNC ENGINE - ASYNC

Persists monthly summaries into an external list store, at most one item
per (user, month) idempotency key.

RULES:
✅ Last-write-wins on LastUpdated, strictly newer wins; ties keep the stored item
✅ Bulk runs are sequential; one item's failure never stops the loop
❌ No locking around find -> create. Two concurrent callers for the same key
   can both create. The store must enforce key uniqueness, or callers must
   serialize per key.
❌ No retry, no timeout handling here
"""

import logging
from typing import Any, Dict, Iterable, Optional, Protocol

from app.domain.models import (
    BulkUpsertReport,
    MonthlySummary,
    SyncError,
    UpsertAction,
    UpsertResult,
)
from app.domain.services.kpi_aggregator import should_update_summary
from app.infrastructure.sharepoint.field_mapper import (
    from_external_fields,
    to_external_fields,
)
from app.utils.time import parse_instant, to_utc

_logger = logging.getLogger(__name__)

DEFAULT_SUMMARY_LIST = "MonthlyRecord_Summary"


class SummaryStoreClient(Protocol):
    """Protocol for the external summary store - ASYNC"""

    async def find_by_key(self, list_name: str, key: str) -> Optional[Dict[str, Any]]:
        """Find the item carrying an idempotency key"""
        ...

    async def create(self, list_name: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Create an item; the result carries the assigned Id"""
        ...

    async def update(self, list_name: str, item_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        """Update an existing item"""
        ...


class MonthlySummarySyncEngine:
    """
    Create / update / skip decision per summary against a store client.
    """

    def __init__(
        self,
        client: SummaryStoreClient,
        list_name: str = DEFAULT_SUMMARY_LIST,
        skip_unchanged: bool = False,
    ):
        """
        Args:
            client: Store client exposing find_by_key / create / update
            list_name: Target list
            skip_unchanged: Also skip newer summaries whose KPI did not change
        """
        self.client = client
        self.list_name = list_name
        self.skip_unchanged = skip_unchanged

    def _is_unchanged(self, existing: Dict[str, Any], summary: MonthlySummary) -> bool:
        try:
            stored = from_external_fields(existing)
        except ValueError:
            return False
        return not should_update_summary(stored, summary)

    async def upsert(self, summary: MonthlySummary) -> UpsertResult:
        """
        Upsert one summary.

        Returns:
            UpsertResult with the action taken and the item id

        Raises:
            Whatever the client raises; it is logged and propagated
        """
        fields = to_external_fields(summary)
        key = fields["IdempotencyKey"]

        try:
            existing = await self.client.find_by_key(self.list_name, key)

            if existing is None:
                created = await self.client.create(self.list_name, dict(fields))
                _logger.info("SUMMARY_CREATED | key=%s | id=%s", key, created.get("Id"))
                return UpsertResult(action=UpsertAction.CREATED, item_id=created.get("Id"))

            existing_id = existing.get("Id")
            existing_updated = parse_instant(existing.get("LastUpdated"))
            is_newer = (
                existing_updated is not None
                and to_utc(summary.last_updated_utc) > existing_updated
            )

            if not is_newer or existing_id is None:
                _logger.debug("SUMMARY_SKIPPED | key=%s | id=%s", key, existing_id)
                return UpsertResult(action=UpsertAction.SKIPPED, item_id=existing_id)

            if self.skip_unchanged and self._is_unchanged(existing, summary):
                _logger.debug("SUMMARY_UNCHANGED | key=%s | id=%s", key, existing_id)
                return UpsertResult(action=UpsertAction.SKIPPED, item_id=existing_id)

            updated = await self.client.update(self.list_name, existing_id, dict(fields))
            _logger.info("SUMMARY_UPDATED | key=%s | id=%s", key, existing_id)
            return UpsertResult(action=UpsertAction.UPDATED, item_id=updated.get("Id", existing_id))

        except Exception as exc:
            _logger.error(f"Upsert failed for {key}: {exc}")
            raise

    async def bulk_upsert(self, summaries: Iterable[MonthlySummary]) -> BulkUpsertReport:
        """
        Upsert summaries one after another, recording failures per item.
        """
        report = BulkUpsertReport()

        for summary in summaries:
            try:
                result = await self.upsert(summary)
            except Exception as exc:
                report.errors.append(
                    SyncError(summary=summary, error=str(exc) or exc.__class__.__name__)
                )
                continue

            if result.action == UpsertAction.CREATED:
                report.created += 1
            elif result.action == UpsertAction.UPDATED:
                report.updated += 1
            else:
                report.skipped += 1

        _logger.info(
            "BULK_UPSERT_DONE | created=%s | updated=%s | skipped=%s | errors=%s",
            report.created, report.updated, report.skipped, len(report.errors),
        )
        return report
