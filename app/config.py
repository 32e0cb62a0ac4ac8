"""TRENDLINE — Central Configuration via Pydantic Settings."""

from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables / .env file."""

    # ── Google Sheets ──
    sheets_base_url: str = "https://sheets.googleapis.com/v4"
    sheets_api_key: Optional[str] = None
    sheets_access_token: Optional[str] = None
    sheet_id: str = ""

    # ── App ──
    log_level: str = "INFO"
    report_timezone: str = "America/New_York"
    cache_max_age: int = 300  # seconds, Cache-Control only

    # ── Rollups ──
    week_start: str = "sun"  # sun | mon
    yoy_min_year: int = 2024
    yoy_year_count: int = 3

    def today(self) -> date:
        """Current calendar date in the reporting timezone."""
        return datetime.now(ZoneInfo(self.report_timezone)).date()

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
