from __future__ import annotations

import os
from pathlib import Path
from typing import List, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError


REQUIRED_ENV_VARS = ("MONGODB_ATLAS_URI", "OPENAI_API_KEY")


class ConfigurationError(RuntimeError):
    """Raised when settings are missing or invalid."""


class MissingSettingsError(ConfigurationError):
    def __init__(self, missing: List[str]) -> None:
        self.missing = list(missing)
        lines = ["Missing required environment variables:"]
        lines.extend(f"  - {name}" for name in self.missing)
        lines.append("")
        lines.append("Create a .env file in the project root with:")
        lines.append("  MONGODB_ATLAS_URI=your_mongodb_connection_string")
        lines.append("  OPENAI_API_KEY=your_openai_api_key")
        super().__init__("\n".join(lines))


def _project_root() -> Path:
    """
    Resolve project root assuming this file lives in: <root>/src/inventory_seeder/config.py
    """
    return Path(__file__).resolve().parents[2]


class Settings(BaseModel):
    # --- Required ---
    mongodb_uri: str = Field(..., min_length=1, description="MongoDB Atlas connection string")
    openai_api_key: str = Field(..., min_length=1, description="OpenAI API key")

    # --- Optional / defaults ---
    openai_model: str = Field(default="gpt-4o-mini")
    openai_embedding_model: str = Field(default="text-embedding-3-small")
    embedding_dimensions: int = Field(default=768, gt=0)

    mongodb_database: str = Field(default="inventory_database")
    mongodb_collection: str = Field(default="items")
    vector_index_name: str = Field(default="vector_index")

    seed_item_count: int = Field(default=10, gt=0)
    batch_size: int = Field(default=3, gt=0)
    batch_pause_ms: int = Field(default=1000, ge=0)

    # Fail the run when the vector index cannot be (re)created
    strict_index: bool = True

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Loads environment variables (optionally from .env) and validates Settings.

    Every missing required variable is reported at once, before any
    connection is attempted.
    """
    if env_file is None:
        env_file = _project_root() / ".env"

    # Load .env if present; environment variables override .env by default
    if env_file.exists():
        load_dotenv(env_file, override=False)

    missing = [name for name in REQUIRED_ENV_VARS if not os.getenv(name, "").strip()]
    if missing:
        raise MissingSettingsError(missing)

    # Map environment variables -> Settings fields
    data = {
        "mongodb_uri": os.getenv("MONGODB_ATLAS_URI", ""),
        "openai_api_key": os.getenv("OPENAI_API_KEY", ""),
        "openai_model": os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
        "openai_embedding_model": os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-3-small"),
        "embedding_dimensions": os.getenv("EMBEDDING_DIMENSIONS", "768"),
        "mongodb_database": os.getenv("MONGODB_DATABASE", "inventory_database"),
        "mongodb_collection": os.getenv("MONGODB_COLLECTION", "items"),
        "vector_index_name": os.getenv("VECTOR_INDEX_NAME", "vector_index"),
        "seed_item_count": os.getenv("SEED_ITEM_COUNT", "10"),
        "batch_size": os.getenv("BATCH_SIZE", "3"),
        "batch_pause_ms": os.getenv("BATCH_PAUSE_MS", "1000"),
        "strict_index": os.getenv("STRICT_INDEX", "true"),
        "log_level": os.getenv("LOG_LEVEL", "INFO").upper(),
    }

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigurationError(
            "Invalid configuration. Check the values of your environment variables.\n"
            f"Details:\n{e}"
        ) from e
