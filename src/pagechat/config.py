"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables  (PAGECHAT__SERVER__PORT=9090)
  2. pagechat.yaml          (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional. The only value most deployments need to set is
the generation API key (PAGECHAT__GENERATION__API_KEY).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, SecretStr
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_DEFAULT_DATA_DIR = platformdirs.user_data_dir("pagechat")
_DEFAULT_DB_PATH = str(Path(_DEFAULT_DATA_DIR) / "pagechat.db")


def _find_config_file() -> str | None:
    """Return the path of the first pagechat.yaml found, or None."""
    candidates = [
        Path("pagechat.yaml"),
        Path(platformdirs.user_config_dir("pagechat")) / "pagechat.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ServerSettings(BaseModel):
    transport: Literal["http", "terminal"] = "http"
    host: str = "127.0.0.1"
    port: int = 8080


class FetcherSettings(BaseModel):
    timeout_seconds: float = 10.0
    user_agent: str = "Mozilla/5.0 (compatible; pagechat/1.0; automated page fetcher)"
    max_redirects: int = 5


class StoreSettings(BaseModel):
    db_path: str = _DEFAULT_DB_PATH
    lookup_timeout_seconds: float = 5.0


class CacheSettings(BaseModel):
    ttl_seconds: int = 300


class ResponderSettings(BaseModel):
    # Corpus characters embedded in the system prompt
    context_chars: int = 3000


class GenerationSettings(BaseModel):
    model: str = "gpt-3.5-turbo"
    temperature: float = 0.7
    max_tokens: int = 500
    presence_penalty: float = 0.6
    frequency_penalty: float = 0.5
    api_key: SecretStr | None = None
    base_url: str | None = None


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: PAGECHAT__SERVER__PORT=9090
        env_prefix="PAGECHAT__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    server: ServerSettings = ServerSettings()
    fetcher: FetcherSettings = FetcherSettings()
    store: StoreSettings = StoreSettings()
    cache: CacheSettings = CacheSettings()
    responder: ResponderSettings = ResponderSettings()
    generation: GenerationSettings = GenerationSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,  # Constructor args (highest priority)
            env_settings,  # Environment variables
            YamlConfigSettingsSource(settings_cls),  # YAML file
        )
