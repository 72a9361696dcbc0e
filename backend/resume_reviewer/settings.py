import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


class Settings(BaseModel):
    APP_NAME: str = os.getenv("APP_NAME", "AI Resume Reviewer")
    ENV: str = os.getenv("ENV", "dev").lower()
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    STORAGE_PATH: str = os.getenv("STORAGE_PATH", "storage/local_storage.json")
    OPENAI_API_KEY: Optional[str] = os.getenv("OPENAI_API_KEY") or None
    OPENAI_API_URL: str = os.getenv("OPENAI_API_URL", "https://api.openai.com/v1/chat/completions")
    OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4")
    OPENAI_TIMEOUT_S: float = float(os.getenv("OPENAI_TIMEOUT_S", "120"))
    RATE_LIMIT: str = os.getenv("RATE_LIMIT", "30/hour")

    @property
    def is_prod(self) -> bool:
        return self.ENV in {"prod", "production"}


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
