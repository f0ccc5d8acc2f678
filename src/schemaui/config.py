"""UI settings loading and validation."""

import logging
from pathlib import Path
from typing import Optional

from pydantic import Field, ValidationError
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from .consts import DEFAULT_TICK_RATE_MS
from .errors import ConfigException
from .form.palette import ComponentPalette

logger = logging.getLogger(__name__)


class UiOptions(BaseSettings):
    """Runtime behaviour of the form UI."""

    tick_rate_ms: int = Field(default=DEFAULT_TICK_RATE_MS, ge=1)
    auto_validate: bool = True
    confirm_exit: bool = True
    show_help: bool = True
    keymap_file: Optional[str] = None
    palette: ComponentPalette = Field(default_factory=ComponentPalette)

    model_config = SettingsConfigDict(
        env_prefix="SCHEMAUI_",
        env_nested_delimiter="__",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlConfigSettingsSource(settings_cls),
        )

    @classmethod
    def load_from_file(cls, config_path: str) -> "UiOptions":
        """Load settings from a TOML file; environment variables still win."""
        path = Path(config_path)
        if not path.exists():
            raise ConfigException(f"Settings file not found: {config_path}")

        class _UiOptions(cls):
            model_config = SettingsConfigDict(
                toml_file=str(path),
                env_prefix="SCHEMAUI_",
                env_nested_delimiter="__",
            )

        try:
            options = _UiOptions()
        except ValidationError as e:
            error_lines = ["Configuration validation failed:"]
            for error in e.errors():
                loc = " -> ".join(str(item) for item in error["loc"])
                error_lines.append(f"  - {loc}: {error['msg']}")
            raise ConfigException("\n".join(error_lines)) from e
        except ValueError as e:
            raise ConfigException(f"Invalid TOML in {config_path}: {e}") from e

        logger.debug(f"Loaded UI settings from {path}")
        return options

    @property
    def tick_rate(self) -> float:
        """Input poll timeout in seconds."""
        return self.tick_rate_ms / 1000
