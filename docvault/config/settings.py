from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "docvault"
    db_username: str = "docvault"
    db_password: str = "secret"

    server_host: str = "0.0.0.0"
    server_port: int = 8000

    # Client side: where the pipeline sends bundles and enforcement requests
    verification_service_url: str = "http://localhost:8000/verify-document"
    enforcement_service_url: str = "http://localhost:8000/flag-fraudulent-account"
    access_token: str = ""
    service_timeout_seconds: float = 15.0

    max_file_size_bytes: int = 50 * 1024 * 1024
    signature_window_bytes: int = 16
    content_scan_window_bytes: int = 64 * 1024
    metadata_window_bytes: int = 256 * 1024
    exif_scan_bytes: int = 2000
    preview_max_bytes: int = 4 * 1024 * 1024

    vault_files_root: str = "/app/files"

    # Server side decision rules
    duplicate_threshold: int = 2
    rapid_edit_seconds: int = 60
    ai_confidence_override: int = 70
    restricted_editors: list[str] = [
        "adobe photoshop",
        "gimp",
        "paint.net",
        "pixlr",
        "canva",
        "affinity photo",
        "corel",
    ]

    oracle_provider: str = "openai"
    oracle_openai_api_key: str = ""
    oracle_openai_model_name: str = "gpt-4o-mini"
    oracle_openai_timeout_seconds: int = 30
    oracle_openai_compatible_base_url: str = ""
    oracle_openai_compatible_api_key: str = ""
    oracle_openai_compatible_model_name: str = ""
    oracle_openrouter_api_key: str = ""
    oracle_openrouter_model_name: str = "google/gemini-2.5-flash"
    oracle_timeout_seconds: int = 30

    auth_admin_url: str = "http://localhost:54321"
    auth_service_key: str = ""
    ban_duration: str = "876000h"

    admin_notification_url: str = ""
    admin_notification_email: str = ""
