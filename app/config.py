# backend configuration
# loads env vars for mongodb, jwt, gemini, firebase and the reminder scan

import os
from pathlib import Path
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# load .env from project root
load_dotenv(Path(__file__).parent.parent / ".env")


class Settings(BaseSettings):
    # mongodb
    MONGODB_URI: str = os.getenv("MONGODB_URI", "")
    MONGODB_DATABASE: str = os.getenv("MONGODB_DATABASE", "minddump_db")

    # jwt auth (tokens are issued by the external auth provider)
    JWT_SECRET: str = os.getenv("JWT_SECRET", "minddump-dev-secret-change-in-production")
    JWT_ALGORITHM: str = "HS256"

    # gemini (entry analysis and insight synthesis)
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    ANALYSIS_TEMPERATURE: float = 0.7
    ANALYSIS_MAX_OUTPUT_TOKENS: int = 1024
    SYNTHESIS_MAX_OUTPUT_TOKENS: int = 2048

    # firebase cloud messaging
    FIREBASE_CREDENTIALS_PATH: str = os.getenv("FIREBASE_CREDENTIALS_PATH", "")

    # reminder scan
    CRON_SECRET: str = os.getenv("CRON_SECRET", "")
    INACTIVITY_THRESHOLD_DAYS: float = 3
    NOTIFICATION_CONCURRENCY: int = 20
    CLEAR_INVALID_PUSH_TOKENS: bool = False
    REMINDER_TITLE: str = "MindDump"
    REMINDER_BODY: str = "Maybe it's time to write down your thoughts again?"

    # stats windows
    WEEKLY_WINDOW_DAYS: int = 7
    MOOD_HISTORY_DAYS: int = 30
    KEYWORDS_WINDOW_DAYS: int = 30
    KEYWORDS_MAX_ENTRIES: int = 50

    # cors
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:3000")

    # journal validation
    JOURNAL_MAX_LENGTH: int = 10000

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
