"""Application configuration using Pydantic Settings."""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "Xero Agent Tools"
    debug: bool = False

    # CORS
    cors_origins: List[str] = ["http://localhost:3000"]

    # Xero custom connection credentials
    xero_client_id: str = ""
    xero_client_secret: str = ""
    # Resolved from the connections endpoint when empty
    xero_tenant_id: str = ""
    xero_scopes: str = (
        "accounting.transactions accounting.contacts "
        "accounting.settings accounting.attachments"
    )

    # Xero endpoints
    xero_api_base_url: str = "https://api.xero.com/api.xro/2.0"
    xero_identity_url: str = "https://identity.xero.com/connect/token"
    xero_connections_url: str = "https://api.xero.com/connections"
    request_timeout: float = 30.0  # seconds

    # Attachments
    max_attachment_size: int = 10 * 1024 * 1024  # 10 MiB


# Create settings instance
settings = Settings()
