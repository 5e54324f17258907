"""
Configuration Management Module

Responsibilities:
1. Read ProShop connection settings from environment variables
2. Read refresh criteria, schedule and persistence settings from refresh_config.json
3. Config validation and defaults

Environment Variables:
    PROSHOP_BASE_URL        - ProShop server URL
    PROSHOP_COOKIE          - Pre-issued session cookie header value
    PROSHOP_REQUEST_TIMEOUT - Request timeout in seconds (default: 30)
    PROSHOP_MAX_RETRIES     - Retries per request on transport failure (default: 2)
"""

import json
import re
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from procache.models.work_order import WorkOrderStatus, parse_status


class ProShopConfig(BaseSettings):
    """ProShop remote source configuration.

    Loaded from environment variables (PROSHOP_*) or a .env file. Session
    handling is limited to replaying a cookie issued elsewhere.
    """

    model_config = SettingsConfigDict(
        env_prefix="PROSHOP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    base_url: str = Field(default="", description="ProShop server URL")
    cookie: str = Field(default="", description="Session cookie header value")
    connect_timeout: int = Field(default=15, description="Connection timeout (seconds)")
    request_timeout: int = Field(default=30, description="Request timeout (seconds)")
    max_retries: int = Field(default=2, ge=0, le=5, description="Retries on transport failure")
    retry_delay: float = Field(default=1.0, ge=0, description="Delay between retries (seconds)")

    def is_valid(self) -> bool:
        """Check if the server URL is configured."""
        return bool(self.base_url)


class UpdateCriteria(BaseSettings):
    """Which work orders a refresh pass should revisit."""

    statuses: set[WorkOrderStatus] = Field(
        default_factory=lambda: {
            WorkOrderStatus.ACTIVE,
            WorkOrderStatus.ON_HOLD,
            WorkOrderStatus.MANUFACTURING_COMPLETE,
            WorkOrderStatus.UNKNOWN,
        },
        description="Target statuses",
    )
    queries: list[str] = Field(
        ["query55", "query56", "query59", "query57", "query58"],
        description="ProShop saved query names",
    )
    machines: list[str] = Field(default_factory=list, description="Resource name prefixes")
    fetch_external: bool = Field(True, description="Run remote queries")
    fetch_internal: bool = Field(True, description="Match records already cached")

    @field_validator("statuses", mode="before")
    def parse_statuses(cls, value):
        if value is None:
            return set()
        parsed = set()
        for item in value:
            if isinstance(item, WorkOrderStatus):
                parsed.add(item)
                continue
            text = str(item).strip()
            key = text.upper().replace(" ", "_")
            if key in WorkOrderStatus.__members__:
                parsed.add(WorkOrderStatus[key])
            else:
                parsed.add(parse_status(text))
        return parsed


class AutoRefreshConfig(BaseSettings):
    """Auto Refresh Configuration"""

    enabled: bool = Field(True, description="Enable auto refresh")
    schedule: list[str] = Field(
        ["06:30", "12:00", "17:30"],
        description="Auto refresh schedule (HH:MM format)",
    )
    save_after_refresh: bool = Field(True, description="Persist snapshot after each pass")

    @field_validator("schedule")
    def validate_schedule(cls, value: list[str]) -> list[str]:
        for time_str in value:
            if not re.match(r"^([01]?\d|2[0-3]):([0-5]\d)$", time_str):
                raise ValueError(f"Invalid time format: {time_str}")
        return value


class PerformanceConfig(BaseSettings):
    """Performance Configuration"""

    concurrency: int = Field(3, ge=1, le=10, description="Concurrent fetch workers")


class PersistenceConfig(BaseSettings):
    """Snapshot persistence configuration"""

    backend: Literal["json", "sqlite"] = Field("json", description="Snapshot backend")
    snapshot_path: Path = Field(Path("data/workorders.pro_cache"), description="JSON snapshot file")
    db_path: Path = Field(Path("data/procache.db"), description="SQLite database file")
    archive_dir: Path | None = Field(None, description="Keep timestamped JSON copies here")


class RefreshConfig(BaseSettings):
    """Complete Refresh Configuration"""

    criteria: UpdateCriteria = Field(default_factory=UpdateCriteria)
    auto_refresh: AutoRefreshConfig = Field(default_factory=AutoRefreshConfig)
    performance: PerformanceConfig = Field(default_factory=PerformanceConfig)
    persistence: PersistenceConfig = Field(default_factory=PersistenceConfig)

    _config_path: str = "refresh_config.json"

    @classmethod
    def load(cls, path: str = "refresh_config.json") -> "RefreshConfig":
        """Load config from JSON file."""
        config_path = Path(path)
        if config_path.exists():
            with config_path.open("r", encoding="utf-8") as handle:
                data = json.load(handle)
            instance = cls(**data)
        else:
            instance = cls()
        instance._config_path = path
        return instance

    def save(self) -> None:
        """Save config to JSON file."""
        with open(self._config_path, "w", encoding="utf-8") as handle:
            json.dump(self.model_dump(mode="json"), handle, indent=2, ensure_ascii=False)

    def reload(self) -> None:
        """Reload config (for detecting runtime changes)."""
        new_config = RefreshConfig.load(self._config_path)
        self.criteria = new_config.criteria
        self.auto_refresh = new_config.auto_refresh
        self.performance = new_config.performance
        self.persistence = new_config.persistence


class Config:
    """Main Config Class - Factory Pattern (NOT Singleton)."""

    def __init__(
        self,
        proshop: ProShopConfig,
        refresh: RefreshConfig,
        reports_dir: Path = Path("reports"),
    ):
        self.proshop = proshop
        self.refresh = refresh
        self.reports_dir = reports_dir

    @classmethod
    def load(cls, refresh_path: str = "refresh_config.json") -> "Config":
        """Factory method to load config.

        ProShop settings: Environment variables > .env
        Refresh config: refresh_config.json
        """
        return cls(
            proshop=ProShopConfig(),
            refresh=RefreshConfig.load(refresh_path),
        )


@lru_cache()
def get_config() -> Config:
    """Get config instance (cached for performance)."""
    return Config.load()
