"""Configuration management for SolEngine."""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict, TomlConfigSettingsSource

from solengine.locations import DEFAULT_CACHE_SIZE
from solengine.schema import FeatureType

CONFIG_FILENAME = "solengine.toml"

# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def find_config_file(start: Path | None = None) -> Path | None:
    """Walk up from *start* (default: cwd) looking for ``solengine.toml``."""
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


class OutputSettings(BaseSettings):
    """How the command line renders results."""

    format: str = Field(default="json", description="Output shape: 'json' or 'object' (pretty JSON of plain records).")
    indent: int | None = Field(default=2, description="JSON indentation. None prints one line per document.")


class CheckerSettings(BaseSettings):
    """Which feature checkers run."""

    enabled: list[str] = Field(
        default_factory=lambda: [feature.value for feature in FeatureType],
        description="Enabled feature checkers, in run order.",
    )
    disabled: list[str] = Field(default_factory=list, description="Checkers removed from the enabled list.")

    def active(self) -> list[str]:
        """Enabled names minus disabled ones, order preserved."""
        disabled = set(self.disabled)
        return [name for name in self.enabled if name not in disabled]


class SolEngineSettings(BaseSettings):
    """Root configuration for SolEngine."""

    model_config = SettingsConfigDict(
        toml_file=CONFIG_FILENAME,
        env_prefix="SOLENGINE_",
        env_nested_delimiter="__",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml_path = find_config_file()
        sources: list[PydanticBaseSettingsSource] = [init_settings, env_settings]
        if toml_path:
            sources.append(TomlConfigSettingsSource(settings_cls, toml_file=toml_path))
        sources.append(file_secret_settings)
        return tuple(sources)

    cache_size: int = Field(default=DEFAULT_CACHE_SIZE, ge=1, description="Location indexers kept per analysis.")
    log_level: str = Field(default="WARNING", description="Log level of the command-line stderr sink.")
    output: OutputSettings = Field(default_factory=OutputSettings)
    checkers: CheckerSettings = Field(default_factory=CheckerSettings)
