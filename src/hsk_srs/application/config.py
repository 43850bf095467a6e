from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from hsk_srs.domain.constants import LOOKUP_FRICTION_THRESHOLD

def config_files() -> list[Path]:
    return [
        Path.home() / ".config/hsk-srs/config.toml",
        Path.home() / ".hsk-srs.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for hsk-srs.
    Supports loading from:
    1. Environment variables (HSK_SRS_*)
    2. Config file (~/.config/hsk-srs/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="HSK_SRS_",
        extra="ignore",
    )

    # Storage
    backend: Literal["json", "memory"] = "json"
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".local/share/hsk-srs")
    cards_file: str = "srs_data.json"
    lookups_file: str = "srs_lookup_count.json"

    # Scheduling policy
    friction_lookup_threshold: int = LOOKUP_FRICTION_THRESHOLD
    strict_levels: bool = False

    # Server
    host: str = "127.0.0.1"
    port: int = 8787

    verbose: int = 1

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        from pydantic_settings import TomlConfigSettingsSource

        # First existing file wins
        toml_file = next((f for f in config_files() if f.exists()), None)

        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("data_dir", mode="before")
    @classmethod
    def resolve_data_dir(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()

    @property
    def cards_path(self) -> Path:
        return self.data_dir / self.cards_file

    @property
    def lookups_path(self) -> Path:
        return self.data_dir / self.lookups_file


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/hsk-srs/config.toml (if exists)
    3. Environment variables (HSK_SRS_*)
    4. cli_overrides (passed from Typer), None values ignored
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
