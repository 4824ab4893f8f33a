from pydantic_settings import BaseSettings
from functools import lru_cache
import os


class Settings(BaseSettings):
    app_name: str = "TalentDesk Recruitment API"
    debug: bool = os.getenv("DEBUG", "false").lower() == "true"
    log_level: str = "INFO"

    # Database - supports both SQLite (local) and PostgreSQL (production)
    database_url: str = "sqlite+aiosqlite:///./talentdesk.db"

    # CORS - comma-separated list of allowed origins
    cors_origins: str = "http://localhost:5173,http://localhost:5174"

    # Uploads
    max_upload_mb: int = 10

    # Candidate identifiers: VTS0000001, VTS0000002, ...
    candidate_id_prefix: str = "VTS"
    candidate_id_width: int = 7
    candidate_counter_key: str = "candidate_id"

    # Spreadsheet import
    placeholder_email_domain: str = "placeholder.com"
    default_import_source: str = "Excel Import"
    default_candidate_status: str = "Submitted"
    import_error_limit: int = 50
    # Errors shown when a sheet yields no usable rows
    import_preview_error_limit: int = 20
    import_update_concurrency: int = 10

    class Config:
        env_file = ".env"
        extra = "ignore"
        # Make field names case-insensitive for environment variables
        case_sensitive = False

    def get_cors_origins(self) -> list:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_mb * 1024 * 1024


@lru_cache()
def get_settings() -> Settings:
    return Settings()
