import os
from functools import lru_cache
from typing import Optional

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    api_base_url: str = Field("http://127.0.0.1:8080", alias="LEARNSYNC_API_BASE_URL")
    api_token: Optional[str] = Field(None, alias="LEARNSYNC_API_TOKEN")
    request_timeout_seconds: float = Field(10.0, gt=0, alias="LEARNSYNC_REQUEST_TIMEOUT_SECONDS")
    user_id: Optional[str] = Field(None, alias="LEARNSYNC_USER_ID")
    refresh_on_startup: bool = Field(True, alias="LEARNSYNC_REFRESH_ON_STARTUP")
    lesson_card_limit: int = Field(8, ge=1, alias="LEARNSYNC_LESSON_CARD_LIMIT")
    learning_path_limit: int = Field(5, ge=1, alias="LEARNSYNC_LEARNING_PATH_LIMIT")
    achievement_preview_count: int = Field(3, ge=0, alias="LEARNSYNC_ACHIEVEMENT_PREVIEW_COUNT")

    class Config:
        env_file = os.getenv("ENV_FILE", ".env")
        env_file_encoding = "utf-8"
        case_sensitive = True
        populate_by_name = True


@lru_cache
def get_settings() -> Settings:
    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as exc:
        raise RuntimeError(f"Invalid learnsync configuration: {exc}") from exc
