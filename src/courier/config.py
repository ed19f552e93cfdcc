"""Runtime configuration for route planning and the command-line tools."""

from pathlib import Path
from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuration loaded from COURIER_* environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="COURIER_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    average_speed_kmph: float = Field(default=20.0, gt=0.0, description="Courier speed used for travel times.")
    max_orders: int = Field(
        default=8,
        ge=1,
        le=12,
        description="Largest order count the exact planner accepts; its tables grow as 4^n.",
    )
    order_count: int = Field(default=5, ge=0, description="Orders synthesized by the CLI when not given.")
    base_latitude: float = Field(default=12.9352, ge=-90.0, le=90.0)
    base_longitude: float = Field(default=77.6245, ge=-180.0, le=180.0)
    seed: Optional[int] = Field(default=None, description="Seed for order synthesis; random when unset.")
    output_path: Path = Field(default=Path("route.geojson"), description="Where the CLI writes the GeoJSON route.")
    log_level: str = Field(default="INFO")

    @field_validator("output_path", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser()

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_level(cls, value: Any) -> str:
        return str(value).strip().upper()


settings = Settings()
