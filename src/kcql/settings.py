"""KCQL settings, read from the environment."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class KCQLSettings(BaseSettings):
    """Settings for a KCQL session."""

    model_config = SettingsConfigDict(
        env_prefix="KCQL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Default namespace scope; empty means all namespaces
    namespace: str = "default"
    debug: bool = False

    # Gateway calls allowed in flight at once
    concurrency: int = Field(default=1, ge=1)

    # Extra relationship rules (JSON), merged over the built-in set
    relationships_file: Optional[str] = None
