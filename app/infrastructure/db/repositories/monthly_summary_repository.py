"""
Monthly Summary Repository
Database-backed summary store speaking the same flat fields as the list API
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, and_
from typing import Any, Dict, List, Optional

from app.infrastructure.db.models import MonthlySummaryModel

# Flat field name -> column
_FIELD_COLUMNS = {
    "UserCode": "user_code",
    "YearMonth": "year_month",
    "DisplayName": "display_name",
    "LastUpdated": "last_updated",
    "KPI_TotalDays": "kpi_total_days",
    "KPI_PlannedRows": "kpi_planned_rows",
    "KPI_CompletedRows": "kpi_completed_rows",
    "KPI_InProgressRows": "kpi_in_progress_rows",
    "KPI_EmptyRows": "kpi_empty_rows",
    "KPI_SpecialNotes": "kpi_special_notes",
    "KPI_Incidents": "kpi_incidents",
    "CompletionRate": "completion_rate",
    "FirstEntryDate": "first_entry_date",
    "LastEntryDate": "last_entry_date",
    "IdempotencyKey": "idempotency_key",
}


class MonthlySummaryRepository:
    """
    Summary store on the local database.

    The (list_name, idempotency_key) unique constraint rejects a second
    create for the same key, so racing creates surface as IntegrityError.
    """

    def __init__(self, session: AsyncSession):
        """Initialize with database session"""
        self.session = session

    async def find_by_key(self, list_name: str, key: str) -> Optional[Dict[str, Any]]:
        result = await self.session.execute(
            select(MonthlySummaryModel).where(
                and_(
                    MonthlySummaryModel.list_name == list_name,
                    MonthlySummaryModel.idempotency_key == key,
                )
            )
        )
        model = result.scalar_one_or_none()
        return self._to_fields(model) if model else None

    async def create(self, list_name: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        model = MonthlySummaryModel(list_name=list_name)
        self._apply(model, fields)

        # Savepoint keeps the session usable after a duplicate-key failure
        async with self.session.begin_nested():
            self.session.add(model)
            await self.session.flush()

        return self._to_fields(model)

    async def update(self, list_name: str, item_id: int, fields: Dict[str, Any]) -> Dict[str, Any]:
        result = await self.session.execute(
            select(MonthlySummaryModel).where(
                and_(
                    MonthlySummaryModel.list_name == list_name,
                    MonthlySummaryModel.id == item_id,
                )
            )
        )
        model = result.scalar_one_or_none()
        if model is None:
            raise LookupError(f"No summary item {item_id} in {list_name}")

        # Savepoint confines a rejected UPDATE to this item
        async with self.session.begin_nested():
            self._apply(model, fields)
            await self.session.flush()

        return self._to_fields(model)

    async def list_for_month(self, list_name: str, year_month: str) -> List[Dict[str, Any]]:
        result = await self.session.execute(
            select(MonthlySummaryModel)
            .where(
                and_(
                    MonthlySummaryModel.list_name == list_name,
                    MonthlySummaryModel.year_month == year_month,
                )
            )
            .order_by(MonthlySummaryModel.user_code)
        )
        return [self._to_fields(model) for model in result.scalars().all()]

    def _apply(self, model: MonthlySummaryModel, fields: Dict[str, Any]) -> None:
        for field_name, column in _FIELD_COLUMNS.items():
            if field_name in fields:
                setattr(model, column, fields[field_name])

    def _to_fields(self, model: MonthlySummaryModel) -> Dict[str, Any]:
        """Convert ORM model to flat list fields"""
        fields = {
            field_name: getattr(model, column)
            for field_name, column in _FIELD_COLUMNS.items()
        }
        fields["Id"] = model.id
        return fields
