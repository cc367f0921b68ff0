"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, ibanctl.toml only contains
overrides.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class ServerConfig(BaseModel):
    """[server] section."""

    model_config = {"frozen": True}

    listen: str = "8080"
    pid_file: Path | None = None
    # Seconds to drain in-flight requests on shutdown; 0 waits indefinitely.
    graceful_timeout: float = Field(default=30.0, ge=0)
    access_log: bool = False


class CacheConfig(BaseModel):
    """[cache] section."""

    model_config = {"frozen": True}

    # Lifetime of cached responses in seconds; 0 never expires.
    ttl: float = Field(default=0.0, ge=0)
    # Seconds between background sweeps of expired entries; 0 disables.
    cleanup_interval: float = Field(default=30.0, ge=0)


class DataConfig(BaseModel):
    """[data] section."""

    model_config = {"frozen": True}

    path: Path = Path("data")
