from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from flashdrill.domain.constants import DEFAULT_MISS_DELAY


def config_files() -> list[Path]:
    return [
        Path.home() / ".config/flashdrill/config.toml",
        Path.home() / ".flashdrill.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for flashdrill.
    Supports loading from:
    1. Environment variables (FLASHDRILL_*)
    2. Config file (~/.config/flashdrill/config.toml)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="FLASHDRILL_",
        extra="ignore",
    )

    # Paths
    state_file: Path = Field(
        default_factory=lambda: Path.home() / ".config/flashdrill/state.json"
    )
    catalog_file: Path | None = None

    # Storage
    store_backend: Literal["file", "memory"] = "file"

    # Session
    miss_delay_seconds: float = Field(default=DEFAULT_MISS_DELAY, ge=0)
    shuffle_catalog: bool = True

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
        return (
            init_settings,
            env_settings,
        )

    @field_validator("state_file", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Any:
        if isinstance(v, str | Path):
            return Path(v).expanduser()
        return v

    @field_validator("catalog_file", mode="before")
    @classmethod
    def resolve_catalog(cls, v: Any) -> Path | None:
        if not v:
            return None
        return Path(v).expanduser().resolve()


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/flashdrill/config.toml (if exists)
    3. Environment variables (FLASHDRILL_*)
    4. cli_overrides (passed from Typer)
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
