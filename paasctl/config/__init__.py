"""Application configuration + the persisted plugin repository store.

All env vars defined here with PAASCTL_ prefix.
Repository store: RepoConfigStore (<home>/config.yaml)
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

from paasctl.config.schema import CliConfigFile
from paasctl.config.store import RepoConfigStore


class PaasctlConfig(BaseSettings):
    # ── App ──
    home: Path = Path.home() / ".paasctl"     # config.yaml + plugins/ live here
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    # ── HTTP ──
    index_timeout: float = 30.0                # per index fetch, seconds
    download_timeout: float = 300.0            # per artifact download, seconds
    max_redirects: int = 10

    # ── Install ──
    install_deadline: Optional[float] = None   # overall deadline per install, seconds
    platform: str = ""                         # override detected platform tag
    require_checksum: bool = False             # refuse artifacts without a published digest
    staging_root: Optional[Path] = None        # parent for staging dirs; None = system temp

    model_config = {"env_prefix": "PAASCTL_", "env_file": ".env", "extra": "ignore"}

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v

    @property
    def config_file(self) -> Path:
        return self.home / "config.yaml"

    @property
    def plugins_dir(self) -> Path:
        return self.home / "plugins"


config = PaasctlConfig()


__all__ = [
    "PaasctlConfig",
    "config",
    "CliConfigFile",
    "RepoConfigStore",
]
