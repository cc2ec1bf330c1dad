"""Configuration for the geocoding and routing clients.

Each client receives its own config model at construction. ``Settings`` reads
them from ``ROADTRIP_*`` environment variables (or a ``.env`` file) for the
server entry point; library code never touches the environment.
"""

from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

USER_AGENT = "roadtrip-routing/1.0"


class GeocoderConfig(BaseModel):
    base_url: str = "https://nominatim.openstreetmap.org"
    timeout_s: float = Field(default=10.0, gt=0)
    user_agent: str = USER_AGENT


class OsrmConfig(BaseModel):
    base_url: str = "https://router.project-osrm.org"
    profile: str = "driving"
    timeout_s: float = Field(default=15.0, gt=0)


class OrsConfig(BaseModel):
    base_url: str = "https://api.openrouteservice.org"
    api_key: Optional[str] = None
    profile: str = "driving-car"
    avoid_features: list[str] = Field(default_factory=lambda: ["highways"])
    timeout_s: float = Field(default=15.0, gt=0)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ROADTRIP_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    geocoder: GeocoderConfig = Field(default_factory=GeocoderConfig)
    osrm: OsrmConfig = Field(default_factory=OsrmConfig)
    ors: OrsConfig = Field(default_factory=OrsConfig)
    gpx_creator: str = "Road Trip Planner"
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
