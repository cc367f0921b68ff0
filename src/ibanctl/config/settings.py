"""IbanSettings: one frozen object layered from four places.

Highest priority first:

1. CLI flags, passed as init kwargs by the root group
2. ``IBANCTL_*`` environment variables (``IBANCTL_CACHE__TTL=60``)
3. ``ibanctl.toml``, from ``--config``, ``IBANCTL_CONFIG`` or walk-up discovery
4. defaults in :mod:`ibanctl.config.models`
"""

from __future__ import annotations

import os
import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from ibanctl.config.models import CacheConfig, DataConfig, ServerConfig

CONFIG_FILENAME = "ibanctl.toml"
CONFIG_ENV_VAR = "IBANCTL_CONFIG"

# The file chosen by from_cli, read by the settings_customise_sources classmethod.
_active_toml: ContextVar[Path | None] = ContextVar("ibanctl_active_toml", default=None)


def find_config(start: Path | None = None) -> Path | None:
    """Locate ibanctl.toml.

    ``IBANCTL_CONFIG`` wins when set (None if it points nowhere); otherwise
    the first ibanctl.toml found walking up from *start* (default: cwd).
    """
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        candidate = Path(env_path)
        return candidate if candidate.is_file() else None

    origin = (start or Path.cwd()).resolve()
    for directory in (origin, *origin.parents):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
    return None


class IbanSettings(BaseSettings):
    """Settings for the ibanctl CLI and service.

    Attributes:
        config_path: The TOML file the settings were read from, if any.
        json_output: ``--json`` on the root group.
        verbose: ``-v`` on the root group.
        log_json: ``--log-json`` on the root group.
    """

    model_config = SettingsConfigDict(
        frozen=True,
        env_prefix="IBANCTL_",
        env_nested_delimiter="__",
    )

    config_path: Path | None = None
    json_output: bool = False
    verbose: bool = False
    log_json: bool = False

    server: ServerConfig = Field(default_factory=ServerConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    data: DataConfig = Field(default_factory=DataConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml_settings = TomlConfigSettingsSource(settings_cls, toml_file=_active_toml.get())
        return init_settings, env_settings, toml_settings

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        search_from: Path | None = None,
        **cli_flags: Any,
    ) -> IbanSettings:
        """Load settings for one CLI invocation.

        An explicit *config_path* that does not exist is ignored, as is a
        missing discovered file; defaults and env vars still apply.

        Raises:
            click.ClickException: The TOML file is not valid TOML.
        """
        toml_path: Path | None
        if config_path:
            explicit = Path(config_path)
            toml_path = explicit if explicit.is_file() else None
        else:
            toml_path = find_config(search_from)

        token = _active_toml.set(toml_path)
        try:
            return cls(config_path=toml_path, **cli_flags)
        except tomllib.TOMLDecodeError as exc:
            msg = f"Invalid TOML in {toml_path}: {exc}"
            raise click.ClickException(msg) from exc
        finally:
            _active_toml.reset(token)

    def with_overrides(
        self,
        *,
        listen: str | None = None,
        pid_file: Path | None = None,
        data_path: Path | None = None,
    ) -> IbanSettings:
        """Return a copy with per-command flags applied over the loaded values."""
        server_update: dict[str, Any] = {}
        if listen is not None:
            server_update["listen"] = listen
        if pid_file is not None:
            server_update["pid_file"] = pid_file
        update: dict[str, Any] = {}
        if server_update:
            update["server"] = self.server.model_copy(update=server_update)
        if data_path is not None:
            update["data"] = self.data.model_copy(update={"path": data_path})
        return self.model_copy(update=update) if update else self
