"""
Application Settings
Load from environment variables
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    """Application settings from environment"""

    # ======================
    # Application
    # ======================
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # ======================
    # Database (summary store mirror)
    # ======================
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/monthly_kpi.db"
    AUTO_CREATE_TABLES: bool = True

    # ======================
    # Summary store
    # ======================
    # "sharepoint" or "database"
    SUMMARY_STORE_BACKEND: str = "sharepoint"

    # ======================
    # SharePoint
    # ======================
    SHAREPOINT_SITE_URL: str = ""
    SHAREPOINT_ACCESS_TOKEN: Optional[str] = None
    SHAREPOINT_TIMEOUT_SECONDS: float = 30.0
    MONTHLY_SUMMARY_LIST: str = "MonthlyRecord_Summary"
    DAILY_RECORDS_LIST: str = "SupportRecord_Daily"

    # ======================
    # KPI policy
    # ======================
    KPI_ROWS_PER_DAY: int = 19
    KPI_USE_WORKING_DAYS: bool = True

    # ======================
    # Scheduler
    # ======================
    SCHEDULER_ENABLED: bool = False
    MONTHLY_SYNC_CRON_HOUR: int = 2
    MONTHLY_SYNC_CRON_MINUTE: int = 0

    # ======================
    # Timezone
    # ======================
    TIMEZONE: str = "Asia/Tokyo"

    # ======================
    # Pydantic v2 config
    # ======================
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="forbid",
    )


settings = Settings()
