from pathlib import Path
from typing import Annotated, Any

import envyaml
from pydantic import Field, PositiveInt, field_validator
from pydantic_settings import (
    BaseSettings,
    NoDecode,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)
from pydantic_settings.sources.types import DEFAULT_PATH, PathType

from himactl.errors import ConfigurationError
from himactl.fetchers.http import DEFAULT_MAX_RETRIES, DEFAULT_TIMEOUT_SECONDS
from himactl.metadata import DEFAULT_BASE_URL
from himactl.model import TILE_WIDTH, Margins, OutputFormat, ResolutionLevel
from himactl.output import DEFAULT_OUTPUT_DIR


class EnvYamlConfigSettingsSource(YamlConfigSettingsSource):
    def __init__(
        self,
        settings_cls: type[BaseSettings],
        *,
        yaml_file: PathType | None = DEFAULT_PATH,
        yaml_file_encoding: str | None = None,
        yaml_config_section: str | None = None,
        env_file: Path | str | None = None,
    ):
        self.env_file = env_file or settings_cls.model_config.get("env_file")
        super().__init__(
            settings_cls,
            yaml_file=yaml_file,
            yaml_file_encoding=yaml_file_encoding,
            yaml_config_section=yaml_config_section,
        )

    def _read_file(self, file_path: Path) -> dict[str, Any]:
        """Read YAML file with environment variable expansion.

        Args:
            file_path (Path): Path to YAML configuration file

        Returns:
            dict[str, Any]: Parsed configuration data with environment variables expanded
        """
        if Path(file_path).exists():
            env_file = self.env_file if self.env_file and Path(self.env_file).exists() else None
            return dict(envyaml.EnvYAML(file_path, env_file, flatten=False))
        return {}


class HimaCtlSettings(BaseSettings):
    model_config = SettingsConfigDict(
        yaml_file="config.yml",
        env_file=".env",
        env_prefix="HIMACTL_",
        extra="ignore",
    )

    base_url: str = DEFAULT_BASE_URL
    tile_width: PositiveInt = TILE_WIDTH
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    max_retries: PositiveInt = DEFAULT_MAX_RETRIES
    num_workers: PositiveInt | None = None
    output_dir: Path = DEFAULT_OUTPUT_DIR
    output_format: OutputFormat = OutputFormat.JPEG
    level: ResolutionLevel = Field(default_factory=ResolutionLevel.default)
    # parsed from the compact TOP[,RIGHT][,BOTTOM][,LEFT] form, not JSON
    margins: Annotated[Margins, NoDecode] = Field(default_factory=Margins.empty)
    store_latest_only: bool = False
    force: bool = False
    set_wallpaper: bool = False

    @field_validator("output_format", mode="before")
    @classmethod
    def _parse_format(cls, value: Any) -> OutputFormat:
        return OutputFormat.parse(value) if isinstance(value, str) else value

    @field_validator("level", mode="before")
    @classmethod
    def _parse_level(cls, value: Any) -> ResolutionLevel:
        return ResolutionLevel.parse(value)

    @field_validator("margins", mode="before")
    @classmethod
    def _parse_margins(cls, value: Any) -> Margins | Any:
        if isinstance(value, (str, int)):
            return Margins.parse(str(value))
        return value

    @field_validator("output_dir", mode="after")
    @classmethod
    def _expand_output_dir(cls, value: Path) -> Path:
        return value.expanduser()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML configuration.

        Returns:
            tuple[PydanticBaseSettingsSource, ...]: Ordered tuple of settings sources
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            EnvYamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


_instance: HimaCtlSettings | None = None


def get_settings(**kwargs: Any) -> HimaCtlSettings:
    """Get or create the global settings instance.

    Args:
        **kwargs: Optional keyword arguments passed to HimaCtlSettings constructor

    Returns:
        Global HimaCtlSettings instance

    Raises:
        ConfigurationError: when a configured value is invalid
    """
    global _instance
    if _instance is None:
        try:
            _instance = HimaCtlSettings(**kwargs)
        except ValueError as e:
            raise ConfigurationError("settings", str(e), e) from e
    return _instance


def reset_settings() -> None:
    global _instance
    _instance = None
