"""Configuration system for mokkun using pydantic-settings.

Supports layered configuration:
1. Built-in defaults (lowest priority)
2. pyproject.toml [tool.mokkun] section (project-level)
3. ./mokkun.toml (project-level, explicit)
4. ~/.config/mokkun/config.toml (user-level, overrides project)
5. Environment variables (highest priority)

Environment variables use MOKKUN_ prefix with nested delimiter __.
Example: MOKKUN_GRID__PAGE_SIZE, MOKKUN_LOG__LEVEL
"""

from __future__ import annotations

import os
import sys

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .log import debug, warn


if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib  # type: ignore[import-not-found]
    except ImportError:
        tomllib = None


def _find_config_files() -> list[Path]:
    """Find all configuration files in order of precedence (lowest first)."""
    files = []

    # Project-level pyproject.toml [tool.mokkun] (lowest file priority)
    pyproject = Path("pyproject.toml")
    if pyproject.exists():
        files.append(pyproject)

    mokkun_toml = Path("mokkun.toml")
    if mokkun_toml.exists():
        files.append(mokkun_toml)

    # User-level config (overrides project configs)
    if sys.platform == "win32":
        user_config = Path(os.environ.get("APPDATA", "~")) / "mokkun" / "config.toml"
    else:
        user_config = Path("~/.config/mokkun/config.toml")
    user_config = user_config.expanduser()
    if user_config.exists():
        files.append(user_config)

    # Environment variable override for config file (highest file priority)
    env_config = os.environ.get("MOKKUN_CONFIG_FILE")
    if env_config:
        env_path = Path(env_config)
        if env_path.exists():
            files.append(env_path)

    return files


def _load_toml_config() -> dict[str, Any]:
    """Load and merge all TOML configuration files."""
    if tomllib is None:
        return {}

    merged: dict[str, Any] = {}

    for config_file in _find_config_files():
        try:
            data = tomllib.loads(config_file.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as e:
            warn(f"Ignoring unreadable config file {config_file}: {e}")
            continue

        if config_file.name == "pyproject.toml":
            data = data.get("tool", {}).get("mokkun", {})

        debug(f"Loaded configuration from {config_file}")
        merged = _deep_merge(merged, data)

    return merged


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


class GridSettings(BaseSettings):
    """Defaults applied to every data table that does not override them.

    Environment prefix: MOKKUN_GRID__
    Example: MOKKUN_GRID__PAGE_SIZE=25
    """

    model_config = SettingsConfigDict(
        env_prefix="MOKKUN_GRID__",
        extra="ignore",
    )

    page_size: int = Field(default=10, ge=1, description="Rows per page when a table omits it")
    page_size_options: Annotated[list[int], NoDecode] = Field(
        default_factory=lambda: [10, 25, 50, 100],
        description="Choices offered by the page size selector",
    )
    resize_min_width: int = Field(default=50, ge=0, description="Lower column width bound (px)")
    resize_max_width: int = Field(default=500, ge=1, description="Upper column width bound (px)")
    group_field: str = Field(default="_group", description="Row key used when grouping omits field")

    @field_validator("page_size_options", mode="before")
    @classmethod
    def parse_comma_separated(cls, v: Any) -> list[int]:
        """Parse comma-separated strings from env vars."""
        if isinstance(v, str):
            return [int(s.strip()) for s in v.split(",") if s.strip()]
        return v or []

    @model_validator(mode="after")
    def validate_resize_bounds(self) -> GridSettings:
        """Validate the minimum width does not exceed the maximum."""
        if self.resize_min_width > self.resize_max_width:
            raise ValueError(
                f"resize_min_width ({self.resize_min_width}) cannot exceed "
                f"resize_max_width ({self.resize_max_width})"
            )
        return self


class FormatSettings(BaseSettings):
    """Cell value formatting settings.

    Environment prefix: MOKKUN_FORMAT__
    Example: MOKKUN_FORMAT__CURRENCY=USD
    """

    model_config = SettingsConfigDict(
        env_prefix="MOKKUN_FORMAT__",
        extra="ignore",
    )

    locale: str = Field(default="ja-JP", description="Locale used for dates and currency")
    currency: str = Field(default="JPY", description="Currency code when a column omits it")
    empty_placeholder: str = Field(default="-", description="Text shown for missing values")


class LogSettings(BaseSettings):
    """Logging settings.

    Environment prefix: MOKKUN_LOG__
    Example: MOKKUN_LOG__LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="MOKKUN_LOG__",
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
    format: str = "%(name)s - %(levelname)s - %(message)s"


class MokkunSettings(BaseSettings):
    """Main settings aggregating all configuration sections.

    Environment prefix: MOKKUN__

    Configuration sources (in order of precedence):
    1. Built-in defaults
    2. pyproject.toml [tool.mokkun] section
    3. ./mokkun.toml (project-level)
    4. ~/.config/mokkun/config.toml (user-level, overrides project)
    5. Environment variables (highest priority)
    """

    model_config = SettingsConfigDict(
        env_prefix="MOKKUN__",
        env_nested_delimiter="__",
        extra="ignore",
    )

    grid: GridSettings = Field(default_factory=GridSettings)
    format: FormatSettings = Field(default_factory=FormatSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    def __init__(self, **data: Any) -> None:
        # Explicit keyword arguments win over TOML files
        merged = _deep_merge(_load_toml_config(), data)
        super().__init__(**merged)

    def to_toml(self) -> str:
        """Export settings as TOML string."""
        lines = ["# mokkun Configuration", "# Generated by: mokkun config --toml", ""]

        all_data = self.model_dump()
        for section_name in ("grid", "format", "log"):
            lines.append(f"[{section_name}]")
            for field_name, field_value in all_data[section_name].items():
                if isinstance(field_value, list):
                    value_str = "[" + ", ".join(str(v) for v in field_value) + "]"
                elif isinstance(field_value, bool):
                    value_str = "true" if field_value else "false"
                elif isinstance(field_value, str):
                    value_str = f'"{field_value}"'
                else:
                    value_str = str(field_value)
                lines.append(f"{field_name} = {value_str}")
            lines.append("")

        return "\n".join(lines)

    def to_env(self) -> str:
        """Export settings as shell environment variables."""
        lines = [
            "# mokkun Environment Variables",
            "# Generated by: mokkun config --env",
            "",
        ]

        all_data = self.model_dump()
        for env_prefix, attr_name in (("GRID", "grid"), ("FORMAT", "format"), ("LOG", "log")):
            for field_name, field_value in all_data[attr_name].items():
                env_name = f"MOKKUN_{env_prefix}__{field_name.upper()}"
                if isinstance(field_value, list):
                    value_str = ",".join(str(v) for v in field_value)
                elif isinstance(field_value, bool):
                    value_str = "true" if field_value else "false"
                else:
                    value_str = str(field_value)
                lines.append(f'export {env_name}="{value_str}"')

        return "\n".join(lines)

    def show(self) -> str:
        """Format settings as a readable table."""
        lines = ["mokkun Configuration", "=" * 60, ""]

        all_data = self.model_dump()
        for display_name, attr_name in (
            ("Grid Defaults", "grid"),
            ("Cell Formatting", "format"),
            ("Logging", "log"),
        ):
            lines.append(f"\n{display_name}")
            lines.append("-" * 40)
            for field_name, field_value in all_data[attr_name].items():
                value_str = str(field_value)
                if len(value_str) > 50:
                    value_str = value_str[:47] + "..."
                lines.append(f"  {field_name:20} = {value_str}")

        return "\n".join(lines)


@lru_cache(maxsize=1)
def get_settings() -> MokkunSettings:
    """Get the global settings instance (cached).

    Call clear_settings() to reload configuration.
    """
    return MokkunSettings()


def clear_settings() -> None:
    """Clear the cached settings to force reload."""
    get_settings.cache_clear()


def reload_settings() -> MokkunSettings:
    """Reload settings from all sources."""
    clear_settings()
    return get_settings()
