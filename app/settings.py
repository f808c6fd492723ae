# app/settings.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from dotenv import load_dotenv

# Ensure .env is loaded if present
load_dotenv()

class Settings(BaseSettings):
    # Google Generative Language API. A missing key is reported per request, not at startup.
    GEMINI_API_KEY: Optional[str] = None
    GEMINI_MODEL: str = "gemini-1.5-flash"
    GEMINI_BASE_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    GEMINI_TIMEOUT: Optional[float] = None  # None = no client-side timeout

    # Status sent with the apology reply when the provider call fails.
    UPSTREAM_FAILURE_STATUS: int = 200

    # Server options
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


def mask_secret(s: Optional[str]) -> Optional[str]:
    if not s:
        return None
    return (s[:4] + "..." + s[-4:]) if len(s) > 8 else "***"


settings = Settings()
