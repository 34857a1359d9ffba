from functools import lru_cache
from typing import List, Tuple

from pydantic import AliasChoices, AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    app_name: str = Field(default="Dabs Site Service")
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:5500",
            "http://127.0.0.1:5500",
        ]
    )

    # Google Sheets
    sheets_api_base_url: AnyHttpUrl = Field(
        default="https://sheets.googleapis.com/v4"
    )
    sheet_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("DABS_SHEET_ID", "SHEET_ID"),
    )
    google_sheets_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "DABS_GOOGLE_SHEETS_API_KEY", "GOOGLE_SHEETS_API_KEY"
        ),
    )
    store_sheet_name: str = Field(default="Stores")
    request_sheet_name: str = Field(default="ProductRequests")
    http_timeout: float = Field(default=10.0)

    # Submission targets
    request_script_url: AnyHttpUrl | None = Field(
        default=None,
        validation_alias=AliasChoices("DABS_REQUEST_SCRIPT_URL", "REQUEST_SCRIPT_URL"),
    )
    request_webhook_url: AnyHttpUrl | None = Field(default=None)
    contact_webhook_url: AnyHttpUrl | None = Field(default=None)
    email_capture_webhook_url: AnyHttpUrl | None = Field(default=None)
    email_capture_script_url: AnyHttpUrl | None = Field(default=None)
    dev_mode: bool = Field(default=False)
    contact_recipient_email: str = Field(default="info@dabscannabis.com")

    # Dashboard
    dashboard_demo_mode: bool = Field(default=False)

    # Store locator
    store_refresh_interval: float = Field(default=300.0)
    default_map_center: Tuple[float, float] = Field(default=(35.0844, -106.6504))
    default_map_zoom: int = Field(default=7)

    # Cookies
    age_gate_cookie_days: int = Field(default=30)
    consent_cookie_days: int = Field(default=365)

    model_config = SettingsConfigDict(
        env_prefix="DABS_", case_sensitive=False, populate_by_name=True
    )

    @field_validator("cors_origins", mode="before")
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @property
    def sheets_configured(self) -> bool:
        return bool(self.sheet_id and self.google_sheets_api_key)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()
