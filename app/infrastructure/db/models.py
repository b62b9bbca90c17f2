"""
Database Models (SQLAlchemy ORM)
Local mirror of the monthly summary list
"""

from sqlalchemy import (
    Column, Integer, String, Float, DateTime, UniqueConstraint
)

from app.infrastructure.db.database import Base
from app.utils.time import utc_now


class MonthlySummaryModel(Base):
    """One row per (list, idempotency key)"""
    __tablename__ = "monthly_summaries"
    __table_args__ = (
        UniqueConstraint("list_name", "idempotency_key", name="uq_monthly_summary_key"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    list_name = Column(String(100), nullable=False, index=True)
    idempotency_key = Column(String(150), nullable=False, index=True)

    user_code = Column(String(100), nullable=False)
    year_month = Column(String(7), nullable=False, index=True)
    display_name = Column(String(200), nullable=False, default="")
    last_updated = Column(String(40), nullable=False)

    kpi_total_days = Column(Integer, nullable=False, default=0)
    kpi_planned_rows = Column(Integer, nullable=False, default=0)
    kpi_completed_rows = Column(Integer, nullable=False, default=0)
    kpi_in_progress_rows = Column(Integer, nullable=False, default=0)
    kpi_empty_rows = Column(Integer, nullable=False, default=0)
    kpi_special_notes = Column(Integer, nullable=False, default=0)
    kpi_incidents = Column(Integer, nullable=False, default=0)
    completion_rate = Column(Float, nullable=False, default=0.0)

    first_entry_date = Column(String(10), nullable=True)
    last_entry_date = Column(String(10), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)
    modified_at = Column(DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now)
