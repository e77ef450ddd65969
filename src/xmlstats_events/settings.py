"""Application settings for xmlstats-events."""

import os
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from xmlstats_events import __version__
from xmlstats_events.runtime_config import current_runtime_config

_TOKEN_ENV_NAMES = ("XMLSTATS_ACCESS_TOKEN", "XMLSTATS_TOKEN")


class Settings(BaseSettings):
    """Runtime settings for the xmlstats upstream and response cache."""

    model_config = SettingsConfigDict(
        env_prefix="XMLSTATS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    access_token: str = Field(
        default="",
        validation_alias=AliasChoices(*_TOKEN_ENV_NAMES),
    )
    host: str = "erikberg.com"
    sport: str = "nba"
    endpoint: str = "events"
    format: str = "json"
    version: str = __version__
    user_agent_contact: str = ""
    time_zone: str = "America/New_York"
    timeout_s: float | None = None
    cache_ttl_s: float = 600.0
    coalesce_requests: bool = True

    @property
    def user_agent(self) -> str:
        return f"xmlstats-exnode/{self.version} ({self.user_agent_contact})"

    @property
    def authorization(self) -> str:
        return f"Bearer {self.access_token}"

    @staticmethod
    def _parse_token_file(path: Path, *, allowed_names: set[str]) -> str:
        try:
            raw = path.read_text(encoding="utf-8").strip()
        except OSError:
            return ""
        if not raw:
            return ""
        first_line = raw.splitlines()[0].strip()
        if not first_line:
            return ""
        if "=" in first_line:
            key_name, value = first_line.split("=", 1)
            if key_name.strip().upper() not in allowed_names:
                return ""
            return value.strip().strip('"').strip("'")
        return first_line.strip().strip('"').strip("'")

    @classmethod
    def from_runtime(cls) -> "Settings":
        """Construct settings from runtime config + direct token env/token-file fallback."""
        runtime = current_runtime_config()
        config_root = runtime.config_path.parent.resolve()

        resolved_token = ""
        for name in _TOKEN_ENV_NAMES:
            resolved_token = os.environ.get(name, "").strip()
            if resolved_token:
                break
        if not resolved_token:
            for candidate in runtime.token_files:
                candidate_path = Path(candidate).expanduser()
                path = (
                    candidate_path
                    if candidate_path.is_absolute()
                    else (config_root / candidate_path).resolve()
                )
                if not path.exists() or not path.is_file():
                    continue
                parsed = cls._parse_token_file(path, allowed_names=set(_TOKEN_ENV_NAMES))
                if parsed:
                    resolved_token = parsed
                    break

        return cls(
            access_token=resolved_token,
            host=runtime.host,
            sport=runtime.sport,
            endpoint=runtime.endpoint,
            format=runtime.format,
            version=runtime.version,
            user_agent_contact=runtime.user_agent_contact,
            time_zone=runtime.time_zone,
            timeout_s=runtime.timeout_s,
            cache_ttl_s=runtime.cache_ttl_s,
            coalesce_requests=runtime.coalesce_requests,
        )
