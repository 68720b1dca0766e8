"""
app/setting.py

Central configuration for the Milo alumni search API.
- Holds secrets, data locations and model choices.
- Uses pydantic-settings so values can be overridden via environment variables or a `.env` file.
- Import `from app.setting import settings` anywhere in the project to access shared config.
Retrieval knobs (top-k, score floors, caps) live in configs/runtime.yaml, read by app.factory.
"""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Settings model holding API keys, the alumni database path, and model defaults.
    Values can be customized by setting environment variables or editing `.env`.
    """

    # ---------- External services ----------
    openai_api_key: Optional[str] = None
    pinecone_api_key: Optional[str] = None
    pinecone_index: str = "yale-alumni"
    pinecone_namespace: Optional[str] = None

    # ---------- Data ----------
    sqlite_path: Path = Path("data/yale.db")              # people / educations / experiences
    runtime_config: Path = Path("configs/runtime.yaml")  # provider + retrieval knobs

    # ---------- Models ----------
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 512                      # must match the Pinecone index
    chat_model: str = "gpt-4o"

    # ---------- Server ----------
    log_level: str = "info"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


# Singleton settings instance used across the app
settings = Settings()
