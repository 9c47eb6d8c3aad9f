"""All shared types, enums, and data shapes. Everything imports from here."""

from enum import Enum
from pathlib import Path
from typing import Literal, Optional, Union

import httpx
from pydantic import BaseModel, Field, field_validator


# ── Enums ──────────────────────────────────────────────────────────────

class RepoOutcomeStatus(str, Enum):
    UNREACHABLE = "unreachable"                  # NetworkError while fetching the index
    NOT_A_PLUGIN_REPO = "not_a_plugin_repo"      # 404 or no "plugins" key
    DECODE_FAILED = "decode_failed"
    HTTP_ERROR = "http_error"
    PLUGIN_NOT_FOUND = "plugin_not_found"
    PLATFORM_UNSUPPORTED = "platform_unsupported"
    DOWNLOAD_FAILED = "download_failed"
    INVALID_URL = "invalid_url"                  # configured base URL does not parse


# ── Repositories ───────────────────────────────────────────────────────

class PluginRepo(BaseModel):
    """A configured plugin repository."""
    model_config = {"frozen": True}

    name: str = Field(..., min_length=1)
    url: str

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("url")
    @classmethod
    def url_must_be_http(cls, v: str) -> str:
        if not is_http_url(v.strip()):
            raise ValueError(f"'{v}' is not a valid url, e.g. http://your_repo.com")
        return v

    def same_name(self, name: str) -> bool:
        return self.name.lower() == name.strip().lower()

    def same_url(self, url: str) -> bool:
        return _url_key(self.url) == _url_key(url)


def _url_key(url: str) -> str:
    return url.strip().rstrip("/").lower()


def is_http_url(value: str) -> bool:
    """True for absolute http(s) URLs with a host that httpx can parse.

    Embedded whitespace is rejected; httpx would percent-encode it into the host.
    """
    if not isinstance(value, str) or any(ch.isspace() for ch in value):
        return False
    try:
        url = httpx.URL(value)
    except (httpx.InvalidURL, TypeError, ValueError):
        return False
    return url.scheme in ("http", "https") and bool(url.host)


# ── Plugin index (wire format of <repo>/list) ──────────────────────────

class PluginBinary(BaseModel):
    """One downloadable artifact for a single platform."""
    model_config = {"frozen": True}

    platform: str
    url: str
    checksum: str = ""                  # hex SHA-1, empty = not published

    @field_validator("checksum", mode="before")
    @classmethod
    def none_is_empty(cls, v):
        return v or ""


class PluginIndexEntry(BaseModel):
    """One (plugin, version) listed by a repository."""
    model_config = {"frozen": True}

    name: str
    version: str
    description: str = ""
    homepage: str = ""
    binaries: list[PluginBinary] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def version_as_string(cls, v):
        if isinstance(v, (int, float)):
            return str(v)
        return v

    @field_validator("description", "homepage", mode="before")
    @classmethod
    def none_is_empty(cls, v):
        return v or ""

    @field_validator("binaries", mode="before")
    @classmethod
    def null_binaries(cls, v):
        return v or []

    @field_validator("binaries")
    @classmethod
    def one_binary_per_platform(cls, v: list[PluginBinary]) -> list[PluginBinary]:
        platforms = [b.platform for b in v]
        if len(platforms) != len(set(platforms)):
            dupes = sorted({p for p in platforms if platforms.count(p) > 1})
            raise ValueError(f"Duplicate platforms in binaries: {dupes}")
        return v

    def binary_for(self, platform: str) -> Optional[PluginBinary]:
        for binary in self.binaries:
            if binary.platform == platform:
                return binary
        return None


class PluginIndex(BaseModel):
    """Parsed content of a repository listing."""
    model_config = {"frozen": True}

    plugins: list[PluginIndexEntry]


class ResolvedArtifact(BaseModel):
    """A concrete artifact chosen from an index for one platform."""
    model_config = {"frozen": True}

    plugin_name: str
    version: str
    platform: str
    url: str
    checksum: str = ""


# ── Install requests ───────────────────────────────────────────────────

class DirectSource(BaseModel):
    """Install from a local file path or an http(s) URL."""
    model_config = {"frozen": True}

    kind: Literal["direct"] = "direct"
    location: str = Field(..., min_length=1)


class NamedRepo(BaseModel):
    model_config = {"frozen": True}

    kind: Literal["named"] = "named"
    name: str = Field(..., min_length=1)


class AnyConfiguredRepo(BaseModel):
    model_config = {"frozen": True}

    kind: Literal["any"] = "any"


RepoSelector = Union[NamedRepo, AnyConfiguredRepo]


class IndexedSource(BaseModel):
    """Install a plugin by name, located through repository indexes."""
    model_config = {"frozen": True}

    kind: Literal["indexed"] = "indexed"
    plugin_name: str = Field(..., min_length=1)
    repo: RepoSelector = Field(..., discriminator="kind")


class InstallRequest(BaseModel):
    """Immutable description of one install invocation."""
    model_config = {"frozen": True}

    source: Union[DirectSource, IndexedSource] = Field(..., discriminator="kind")
    platform: str


# ── Install results ────────────────────────────────────────────────────

class DownloadedArtifact(BaseModel):
    """A file sitting in the staging directory, not yet promoted by the host."""
    model_config = {"frozen": True}

    path: Path
    size: int
    source_url: Optional[str] = None    # None for staged local files


class RepoOutcome(BaseModel):
    """Why a repository was skipped during a multi-repository search."""
    model_config = {"frozen": True}

    repo_name: str
    url: str
    status: RepoOutcomeStatus
    detail: str = ""


class InstallResult(BaseModel):
    """Validated artifact handed to the plugin host."""
    model_config = {"frozen": True}

    artifact: DownloadedArtifact
    staging_dir: Path
    plugin_name: str = ""
    version: str = ""
    repo_name: Optional[str] = None     # None for direct installs
    checksum_verified: bool = False
    skipped: list[RepoOutcome] = Field(default_factory=list)
