# restobid/core/settings.py
from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_ROOT = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    app_env: Literal["development", "test", "production"] = "development"
    log_level: str = "INFO"
    log_json: bool = True

    # --- Reference data ---
    reference_data_dir: Path = PACKAGE_ROOT / "reference"
    rule_set_path: Path = PACKAGE_ROOT / "rules" / "rule_sets" / "line_items.v1.yaml"

    # --- Storage ---
    project_store_dir: Path = Path("./.restobid/projects")

    # --- ESX conversion service ---
    esx_server_url: Optional[str] = None
    esx_timeout_seconds: float = 30.0

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RESTOBID_",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def effective_log_level(self) -> str:
        if self.app_env == "production":
            return "WARNING"
        if self.app_env == "development":
            return "DEBUG"
        return self.log_level.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings()
