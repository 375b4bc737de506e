import os
from pathlib import Path

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env for local runs only where values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from ISLE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ISLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Logging format (console or json)")

    # Map Generation Configuration
    default_map_width: int = Field(default=800, gt=0, description="Default map width")
    default_map_height: int = Field(default=600, gt=0, description="Default map height")
    default_num_points: int = Field(default=2000, ge=3, description="Default number of regions")


# Instantiate singleton settings object
settings = Settings()
