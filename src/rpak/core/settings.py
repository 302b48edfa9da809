"""Configuration loading for rpak

Priority, highest first:
  1. Keyword arguments
  2. ``RPAK_*`` environment variables
  3. ``rpak.toml`` at the project root
  4. Defaults below
"""

import threading
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Type, Union

import tomlkit
from pydantic import PositiveInt, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from tomlkit.exceptions import TOMLKitError

from .exceptions import ConfigError
from .manifest import DEFAULT_PROJECT_NAME

CONFIG_FILE = "rpak.toml"
DEFAULT_REPOS = "https://cloud.r-project.org"


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a project's rpak.toml"""

    def __init__(self, settings_cls: Type[BaseSettings], toml_path: Optional[Path]):
        super().__init__(settings_cls)
        self._data: Dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            try:
                document = tomlkit.parse(toml_path.read_text(encoding="utf-8"))
            except TOMLKitError as e:
                raise ConfigError(f"Invalid {toml_path.name}", details=str(e))
            self._data = document.unwrap()

    def get_field_value(self, field: Any, field_name: str) -> Tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, False

    def __call__(self) -> Dict[str, Any]:
        return self._data


# Config file of the Settings object under construction
_tls = threading.local()


class Settings(BaseSettings):
    """Effective settings for one project"""

    model_config = SettingsConfigDict(
        frozen=True,
        strict=True,
        extra="ignore",
        env_prefix="RPAK_",
        env_ignore_empty=True,
    )

    rscript: str = "Rscript"
    repos: str = DEFAULT_REPOS
    project_name: str = DEFAULT_PROJECT_NAME
    timeout: Optional[PositiveInt] = None

    @field_validator("timeout", mode="before")
    @classmethod
    def _timeout_from_env(cls, value: Any) -> Any:
        # Environment values arrive as text
        if isinstance(value, str) and value.strip().isdigit():
            return int(value)
        return value

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, getattr(_tls, "toml_path", None)),
        )


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"'{'.'.join(str(part) for part in err['loc'])}': {err['msg']}"
        for err in error.errors()
    )


def load_settings(project_root: Union[str, Path]) -> Settings:
    """
    Load settings for a project directory.

    Args:
        project_root: Project directory searched for rpak.toml

    Raises:
        ConfigError: If rpak.toml cannot be parsed or a value has the wrong type
    """
    _tls.toml_path = Path(project_root) / CONFIG_FILE
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigError("Invalid settings", details=_describe(e))
    finally:
        _tls.toml_path = None
