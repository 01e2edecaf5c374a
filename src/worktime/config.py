from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Get the absolute path to the project root
PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_DB_PATH = str(PROJECT_ROOT / "databases" / "worktime.db")
DEFAULT_LOG_DIR = str(PROJECT_ROOT / "logs")


class Settings(BaseSettings):
    """
    Centralized runtime configuration for the worktime service.
    All defaults are sensible for dev-mode; ops override via ENV.
    """

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=False, extra="ignore"
    )

    # --- Database ---
    db_path: str = Field(default=DEFAULT_DB_PATH, alias="WORKTIME_DB_PATH")

    # --- Submission quota ---
    quota_limit: int = Field(default=5, alias="WORKTIME_QUOTA_LIMIT")

    # --- Wage estimation policy ---
    public_holidays_per_year: int = Field(default=12, alias="WORKTIME_PUBLIC_HOLIDAYS")
    annual_leave_days: int = Field(default=7, alias="WORKTIME_ANNUAL_LEAVE_DAYS")
    max_estimated_wage: int = Field(
        default=100_000_000, alias="WORKTIME_MAX_ESTIMATED_WAGE"
    )

    # --- Logging ---
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_dir: str = Field(default=DEFAULT_LOG_DIR, alias="LOG_DIR")

    # --- HTTP ---
    cors_any: bool = Field(default=False, alias="CORS_ANY")
    api_host: str = Field(default="0.0.0.0", alias="API_HOST")
    api_port: int = Field(default=8000, alias="API_PORT")


# Create a singleton instance
settings = Settings()
