"""
Configuration settings for the assignment document service.
Loads environment variables and provides application-wide settings.

Only the HTTP layer reads these; the parsing and generation services take
their settings as constructor arguments.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Templates
    TEMPLATE_DIR: str = "./templates"
    DEFAULT_COLLEGE_NAME: str = "Local Government Training Institute"
    DEFAULT_COLLEGE_CODE: str = "LGTI"

    # Uploads
    MAX_FILE_SIZE: int = 10 * 1024 * 1024  # 10 MB
    SUPPORTED_FILE_TYPES: List[str] = [".pdf", ".docx"]

    # Server Configuration
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: str = "http://localhost:3000,http://localhost:3001"
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

    def get_allowed_origins(self) -> List[str]:
        """Parse ALLOWED_ORIGINS string into a list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",")]


# Global settings instance
settings = Settings()
