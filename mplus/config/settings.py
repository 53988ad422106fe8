# mplus/config/settings.py

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    # "json" keeps the whole state document in STATE_FILE, "sql" uses DATABASE_URL
    STORAGE_BACKEND: str = "json"
    STATE_FILE: str = "data/state.json"
    DATABASE_URL: str = "sqlite+aiosqlite:///./mplus.db"

    SESSION_RETENTION_DEFAULT: int = 12
    SOLVER_ATTEMPTS_DEFAULT: int = 200
    SOLVER_SHORTLIST_SIZE: int = 10
    LOCK_MINUTES_MAX: int = 60 * 24 * 14

    class Config:
        env_file = ".env"
        env_prefix = "MPLUS_"


settings = Settings()
