import logging
from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from nihongo_flow.domain.constants import DEFAULT_SESSION_LIMIT

CONFIG_FILES = [
    Path(".config/nihongo-flow/config.toml"),
    Path(".nihongo-flow.toml"),
]


class AppConfig(BaseSettings):
    """
    Configuration model for nihongo-flow.
    Supports loading from:
    1. Config file (~/.config/nihongo-flow/config.toml)
    2. Environment variables (NIHONGO_FLOW_*)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="NIHONGO_FLOW_",
        extra="ignore",
    )

    # Paths
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".local/share/nihongo-flow")

    # Storage
    storage: Literal["csv", "memory"] = "csv"
    seed_samples: bool = True

    # Sessions
    session_limit: int = Field(default=DEFAULT_SESSION_LIMIT, ge=0)

    # 0 = warnings only, 1 = info, 2+ = debug
    verbose: int = Field(default=1, ge=0)

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

        # First existing config file wins
        toml_file = find_config_file()

        # Earlier sources take priority: CLI overrides, then env, then file
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

    @field_validator("data_dir", mode="before")
    @classmethod
    def resolve_path(cls, v: Any) -> Path:
        return Path(v).expanduser().resolve()


def find_config_file() -> Path | None:
    for rel in CONFIG_FILES:
        candidate = Path.home() / rel
        if candidate.exists():
            return candidate
    return None


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/nihongo-flow/config.toml (if exists)
    3. Environment variables (NIHONGO_FLOW_*)
    4. cli_overrides (passed from Typer); None values are ignored
    """
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)


def log_level(verbose: int) -> int:
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG
