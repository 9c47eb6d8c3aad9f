"""Typed exception hierarchy. Every error paasctl can raise."""

from enum import Enum


class PaasctlError(Exception):
    """Base exception for all paasctl errors."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.details = details or {}


class UsageError(PaasctlError):
    """Malformed input (bad URL, empty name, conflicting options). Raised before any network I/O."""
    pass


class DuplicateRepoError(UsageError):
    """A repository with the same name (case-insensitive) or URL is already configured."""
    def __init__(self, message: str, repo_name: str = "", url: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.repo_name = repo_name
        self.url = url


class ConfigError(PaasctlError):
    """The persisted configuration file could not be read or parsed."""
    def __init__(self, message: str, path: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.path = path


# ── Repository lookup ───────────────────────────────────────────────────────


class UnknownRepoError(PaasctlError):
    """The named repository is not in the configured set."""
    def __init__(self, message: str, repo_name: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.repo_name = repo_name


class NotAPluginRepoError(PaasctlError):
    """The URL was reachable but does not expose a plugin index (404 or no ``plugins`` key)."""
    def __init__(self, message: str, url: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.url = url


class PluginNotFoundError(PaasctlError):
    """The plugin name is absent from the index."""
    def __init__(self, message: str, plugin_name: str = "", repo_name: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.plugin_name = plugin_name
        self.repo_name = repo_name


class PlatformUnsupportedError(PluginNotFoundError):
    """The plugin is listed but publishes no binary for this platform."""
    def __init__(self, message: str, platform: str = "", available: list = None, **kwargs):
        super().__init__(message, **kwargs)
        self.platform = platform
        self.available = available or []


class NotFoundInAnyRepositoryError(PluginNotFoundError):
    """Every configured repository was searched without a successful candidate."""
    def __init__(self, message: str, outcomes: list = None, **kwargs):
        super().__init__(message, **kwargs)
        self.outcomes = outcomes or []


class SourceNotFoundError(PaasctlError):
    """Direct install source is neither a URL nor an existing regular file."""
    def __init__(self, message: str, location: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.location = location


# ── Transport ───────────────────────────────────────────────────────────────


class NetworkErrorKind(str, Enum):
    DIAL = "dial"            # connection could not be established
    TIMEOUT = "timeout"
    TLS = "tls"
    TRANSPORT = "transport"  # anything else below HTTP


class NetworkError(PaasctlError):
    """Unreachable host, timeout, TLS or dial failure. ``cause`` is the root low-level exception."""
    def __init__(
        self,
        message: str,
        url: str = "",
        kind: NetworkErrorKind = NetworkErrorKind.TRANSPORT,
        cause: BaseException = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.url = url
        self.kind = kind
        self.cause = cause

    @property
    def is_dial_failure(self) -> bool:
        return self.kind == NetworkErrorKind.DIAL


class HttpError(PaasctlError):
    """Non-404, non-2xx HTTP response."""
    def __init__(self, message: str, url: str = "", status_code: int = 0, **kwargs):
        super().__init__(message, **kwargs)
        self.url = url
        self.status_code = status_code


class RedirectRefusedError(HttpError):
    """Redirect limit exceeded, non-http(s) target, or https → http downgrade."""
    pass


class DecodeError(PaasctlError):
    """Response body did not parse as a plugin index."""
    def __init__(self, message: str, url: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.url = url


# ── Artifact integrity / storage ────────────────────────────────────────────


class DigestMismatchError(PaasctlError):
    """Downloaded artifact does not match the advertised digest. Always fatal."""
    def __init__(self, message: str, path: str = "", expected: str = "", actual: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.path = path
        self.expected = expected
        self.actual = actual


class UnverifiedArtifactError(PaasctlError):
    """The index publishes no digest but checksums are required."""
    def __init__(self, message: str, plugin_name: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.plugin_name = plugin_name


class InstallIOError(PaasctlError):
    """Staging, disk write or rename failure."""
    def __init__(self, message: str, path: str = "", **kwargs):
        super().__init__(message, **kwargs)
        self.path = path
