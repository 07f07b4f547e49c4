"""All settings, loaded from the environment or the .env file."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # App
    app_url: str = "http://localhost:8000"
    database_url: str = "sqlite:///./pipeline.db"
    log_level: str = "INFO"
    log_file: str = ""  # empty = stdout only

    # Opportunity defaults (applied on create)
    default_lead_source: str = "Referrals"
    default_salesperson: str = "Unknown"

    # Dashboard behavior
    dashboard_compare_previous_month: bool = True
    seed_sample_data: bool = False

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
