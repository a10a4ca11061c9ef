"""
Configuration and environment handling for YardScout.
"""
import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

# Load environment variables
load_dotenv()


LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"


class UpstreamConfig(BaseModel):
    """Where the branch network lives and how we present ourselves to it."""
    base_url: str = Field(
        default_factory=lambda: os.getenv("YARDSCOUT_BASE_URL", "https://www.lkqpickyourpart.com")
    )
    inventory_path: str = Field(default="/DesktopModules/pyp_vehicleInventory/getVehicleInventory.aspx")
    location_page: str = Field(default="/inventory/")
    user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        )
    )


class SearchConfig(BaseModel):
    """Fan-out and HTTP retry configuration."""
    max_concurrent_requests: int = Field(
        default_factory=lambda: int(os.getenv("YARDSCOUT_MAX_CONCURRENT_REQUESTS", "5")),
        ge=1,
    )
    request_timeout: float = Field(
        default_factory=lambda: float(os.getenv("YARDSCOUT_REQUEST_TIMEOUT", "15")),
        gt=0,
        description="Seconds before a single attempt is abandoned",
    )
    request_delay: float = Field(
        default_factory=lambda: float(os.getenv("YARDSCOUT_REQUEST_DELAY", "0.5")),
        ge=0,
        description="Throttle pause after each branch request",
    )
    max_retries: int = Field(default=3, ge=1, description="Total attempts per request")
    base_retry_delay: float = Field(default=1.0, ge=0)
    max_retry_delay: float = Field(default=10.0, ge=0)


class CacheConfig(BaseModel):
    """TTLs for the in-memory caches (seconds)."""
    inventory_ttl: float = Field(
        default_factory=lambda: float(os.getenv("YARDSCOUT_INVENTORY_TTL", "300")),
        ge=0,
    )
    directory_ttl: float = Field(default=24 * 60 * 60, ge=0)
    directory_retry_interval: float = Field(
        default=5 * 60,
        ge=0,
        description="Wait after a failed directory refresh before hitting the network again",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())


class Config(BaseModel):
    """Main configuration."""
    upstream: UpstreamConfig = Field(default_factory=UpstreamConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# Singleton config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get or create the singleton config instance."""
    global _config
    if _config is None:
        _config = Config()
    return _config


def setup_logging(level: Optional[str] = None) -> None:
    """Configure root logging once for command-line use."""
    level = (level or get_config().logging.level).upper()
    logging.basicConfig(
        format=LOG_FORMAT,
        level=getattr(logging, level, logging.INFO),
    )
