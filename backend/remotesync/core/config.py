"""Application settings.

All values are read from the environment (or a local ``.env`` file) once at
import time and exposed through the module-level ``settings`` singleton.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the remotesync service.

    Attributes:
        ENVIRONMENT: Deployment environment name (local, dev, prd).
        LOCAL_DEVELOPMENT: Use human-readable log lines instead of JSON.
        LOG_LEVEL: Root log level for the ``remotesync`` logger tree.
        HTTP_TIMEOUT_SECONDS: Timeout applied to every outbound provider call.
        USER_AGENT: User-Agent header sent to providers.
        SETTLE_DELAY_SECONDS: Fixed wait after creating a remote resource.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", case_sensitive=True)

    ENVIRONMENT: str = "local"
    LOCAL_DEVELOPMENT: bool = True
    LOG_LEVEL: str = "INFO"

    HTTP_TIMEOUT_SECONDS: float = Field(30.0, gt=0)
    USER_AGENT: str = "remotesync"

    # Post-create settle wait; a single fixed suspension, capped at one second
    SETTLE_DELAY_SECONDS: float = Field(1.0, ge=0.0, le=1.0)

    # GitHub
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_API_VERSION: str = "2022-11-28"
    GITHUB_DEFAULT_REPO_DESCRIPTION: str = "Created by remotesync"
    GITHUB_COMMIT_MESSAGE_TEMPLATE: str = "feat: update {path} via remotesync"
    GITHUB_REPO_PRIVATE: bool = False
    GITHUB_REPO_AUTO_INIT: bool = True

    # Google Drive
    GOOGLE_DRIVE_API_URL: str = "https://www.googleapis.com/drive/v3/files"
    GOOGLE_DRIVE_UPLOAD_URL: str = "https://www.googleapis.com/upload/drive/v3/files"
    DRIVE_MULTIPART_BOUNDARY: str = "-------314159265358979323846"
    DRIVE_HISTORY_FILE_NAME: str = "search_history.json"
    DRIVE_HISTORY_DESCRIPTION: str = "Search history backup from remotesync"
    DRIVE_PARENT_FOLDER_ID: Optional[str] = None

    @field_validator("GITHUB_API_URL", "GOOGLE_DRIVE_API_URL", "GOOGLE_DRIVE_UPLOAD_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs so paths can be appended with a single slash."""
        return v.rstrip("/")

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        """Accept lowercase level names from the environment."""
        return v.upper()


settings = Settings()
