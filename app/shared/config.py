# app/shared/config.py
from pydantic import BaseModel
import os

_DATA_DIR = os.getenv("DATA_DIR", "./data")

class Settings(BaseModel):
    ENV: str = os.getenv("ENV", "dev")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # session tokens
    JWT_KEY: str = os.getenv("JWT_KEY", "dev-secret-key-change-in-prod")
    JWT_ALG: str = os.getenv("JWT_ALG", "HS256")
    SESSION_TTL_MIN: int = int(os.getenv("SESSION_TTL_MIN", str(24 * 60)))
    SESSION_SWEEP_THRESHOLD: int = int(os.getenv("SESSION_SWEEP_THRESHOLD", "1000"))
    SESSION_SWEEP_INTERVAL_SEC: float = float(os.getenv("SESSION_SWEEP_INTERVAL_SEC", "300"))

    # storage
    DATA_DIR: str = _DATA_DIR
    DB_URL: str = os.getenv("DB_URL", f"sqlite:///{_DATA_DIR}/filemanager.db")
    DEBUG_SQL: bool = os.getenv("DEBUG_SQL", "false").lower() == "true"
    FILES_ROOT: str = os.getenv("FILES_ROOT", "./userfiles")

    # files
    MAX_UPLOAD_BYTES: int = int(os.getenv("MAX_UPLOAD_BYTES", str(10 * 1024 * 1024)))
    PREVIEW_LINES: int = int(os.getenv("PREVIEW_LINES", "100"))

settings = Settings()
