from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from shobdo.domain.constants import REQUEST_TIMEOUT


def config_file_candidates() -> list[Path]:
    # Home may be patched in tests, so resolve at call time.
    return [
        Path.home() / ".config/shobdo/config.toml",
        Path.home() / ".shobdo.toml",
    ]


class AppConfig(BaseSettings):
    """
    Configuration model for shobdo.
    Supports loading from:
    1. Config file (~/.config/shobdo/config.toml or ~/.shobdo.toml)
    2. Environment variables (SHOBDO_*)
    3. Manual overrides (CLI)
    """

    model_config = SettingsConfigDict(
        env_prefix="SHOBDO_",
        extra="ignore",
    )

    # Storage
    backend: Literal["yaml", "postgrest", "memory"] = "yaml"
    data_file: Path = Field(default_factory=lambda: Path.home() / ".config/shobdo/words.yaml")
    postgrest_url: str | None = None
    postgrest_api_key: str | None = None
    request_timeout: float = REQUEST_TIMEOUT

    # Learner
    user_id: str = "local"

    # Logging
    log_dir: Path = Field(default_factory=lambda: Path.home() / ".config/shobdo/logs")
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

        toml_file = next((f for f in config_file_candidates() if f.exists()), None)

        # Earlier sources win: CLI overrides, then env, then the file.
        if toml_file:
            return (
                init_settings,
                env_settings,
                TomlConfigSettingsSource(settings_cls, toml_file=toml_file),
            )
        return (init_settings, env_settings)

    @field_validator("data_file", "log_dir", mode="before")
    @classmethod
    def expand_path(cls, v: Any) -> Path:
        return Path(v).expanduser()

    @field_validator("postgrest_url", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: Any) -> str | None:
        if v is None:
            return None
        return str(v).rstrip("/")

    @model_validator(mode="after")
    def check_backend(self) -> "AppConfig":
        if self.backend == "postgrest" and not self.postgrest_url:
            raise ValueError("postgrest_url is required when backend is 'postgrest'")
        return self


def resolve_config(cli_overrides: dict[str, Any] | None = None) -> AppConfig:
    """
    Multi-layered configuration resolution.
    1. Defaults in AppConfig
    2. ~/.config/shobdo/config.toml (if exists)
    3. Environment variables (SHOBDO_*)
    4. cli_overrides (passed from Typer)
    """
    # Typer passes None for options the user did not set.
    overrides = {k: v for k, v in (cli_overrides or {}).items() if v is not None}
    return AppConfig(**overrides)
