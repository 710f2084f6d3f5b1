"""Catalog settings, read from the environment."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app_catalog.ports import PROBE_TIMEOUT_SECONDS

DEFAULT_REPOSITORY_PATH = Path("apps") / "repository"


class CatalogSettings(BaseSettings):
    """Catalog settings. Each can be set as APP_CATALOG_<NAME>."""

    model_config = SettingsConfigDict(env_prefix="APP_CATALOG_")

    repository_path: Path = DEFAULT_REPOSITORY_PATH
    probe_timeout: float = Field(PROBE_TIMEOUT_SECONDS, gt=0)
