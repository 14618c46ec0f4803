"""Application configuration"""

from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # API Settings
    API_HOST: str = "0.0.0.0"  # Override in .env
    API_PORT: int = 8000  # Override in .env
    DEBUG: bool = False  # Override in .env
    # CORS: Comma-separated list of allowed origins
    # Examples: "http://localhost:3000,https://app.example.com"
    ALLOWED_ORIGINS: str = (
        "http://localhost:3000,http://127.0.0.1:3000"  # Override in .env
    )

    # Session storage
    # Every session gets <DATA_DIR>/<session>/ holding the store and the schema artifact
    DATA_DIR: str = "data"
    DATABASE_FILENAME: str = "database.db"
    SCHEMA_FILENAME: str = "schema.json"

    # Store connection
    STORE_TIMEOUT_SECONDS: float = 5.0
    STORE_BUSY_RETRIES: int = 3
    STORE_RETRY_DELAY_SECONDS: float = 0.05

    # Execution driver
    # Leading characters of a failed statement written to the warning log
    STATEMENT_PREVIEW_CHARS: int = 100

    # Logging
    LOG_LEVEL: str = "INFO"

    # Sentry Error Tracking (optional - leave empty to disable)
    SENTRY_DSN: str = ""  # Override in .env

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse allowed origins into list"""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]

    @property
    def data_path(self) -> Path:
        """Resolved root directory for session data"""
        return Path(self.DATA_DIR).resolve()

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore",  # Ignore extra environment variables not defined in Settings
    }


settings = Settings()
