"""Application configuration and settings management."""

from pathlib import Path
from typing import Annotated, Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="DELIVERY_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Delivery Assignment API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for exported files.")

    geocoder_base_url: str = Field(
        default="https://nominatim.openstreetmap.org",
        description="Base URL for the Nominatim-compatible text search service.",
    )
    geocoder_user_agent: str = Field(
        default="delivery-assign/1.0",
        description="User-Agent sent with every geocoding request (required by public Nominatim).",
    )
    geocoder_timeout_seconds: float = Field(default=10.0, gt=0.0)
    geocode_concurrency: int = Field(default=4, ge=1, description="Workers draining the geocode queue.")
    geocode_throttle_seconds: float = Field(
        default=0.12,
        ge=0.0,
        description="Pause each worker takes after a lookup to stay under the public rate limit.",
    )

    proximity_load_penalty_km: float = Field(
        default=0.5,
        ge=0.0,
        description="Distance surcharge (km) per order already assigned to a driver.",
    )
    fuzzy_city_weight: float = Field(default=0.9, ge=0.0)
    fuzzy_address_weight: float = Field(default=0.95, ge=0.0)
    fuzzy_threshold: float = Field(default=0.25, ge=0.0, le=1.0)

    drivers_table: str = "drivers"
    driver_profiles_table: str = Field(
        default="profiles",
        description="Generic profile table used when the drivers table is empty.",
    )
    orders_table: str = "orders"
    completed_status: str = Field(default="completed", description="Terminal order status excluded from runs.")

    frontend_allowed_origins: Annotated[tuple[str, ...], NoDecode] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8080",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    @field_validator("data_root", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("geocoder_base_url", mode="after")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            # Try JSON first
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()


settings = Settings()
