# app/core/config.py
from typing import List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # required, no defaults
    SECRET_KEY: str
    DATABASE_URL: str

    # token signing; no expiry unless configured
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: Optional[int] = None

    DATA_DIR: str = "./data"
    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"
    SQL_ECHO: bool = False

    # name of the task the external SfM worker consumes
    SFM_TASK_NAME: str = "worker.sfm.process_scene"

    # load from project-root .env and ignore everything else in it
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )