# config.py

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Gemini
    GEMINI_API_KEY: str = Field("", validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY"))
    GEMINI_MODEL: str = "gemini-2.5-flash"

    # Locale of everything the model writes back
    RESPONSE_LANGUAGE: str = "Traditional Chinese (Taiwan usage)"
    CURRENCY: str = "New Taiwan Dollar (NT$)"
    CHAT_FALLBACK_MESSAGE: str = "抱歉，我現在無法回答，請稍後再試。"

    # Local history
    HISTORY_DIR: str = ".voyage_history"

    # Public address of the Streamlit app, used for share links
    APP_BASE_URL: str = "http://localhost:8501/"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
    )


settings = Settings()
