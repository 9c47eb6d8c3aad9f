"""paasctl — plugin tooling for the PaaS command-line client.

Usage:
    from paasctl.plugins import PluginInstaller, build_request

    installer = PluginInstaller(repo_store)
    result = await installer.install(build_request("my-plugin", all_repos=True))
"""

from paasctl.exceptions import (
    PaasctlError, UsageError, UnknownRepoError, DuplicateRepoError,
    NotAPluginRepoError, PluginNotFoundError, PlatformUnsupportedError,
    NotFoundInAnyRepositoryError, SourceNotFoundError, NetworkError,
    NetworkErrorKind, HttpError, RedirectRefusedError, DecodeError,
    DigestMismatchError, UnverifiedArtifactError, InstallIOError, ConfigError,
)
from paasctl.types import (
    PluginRepo, PluginBinary, PluginIndexEntry, PluginIndex, ResolvedArtifact,
    DownloadedArtifact, DirectSource, IndexedSource, NamedRepo,
    AnyConfiguredRepo, InstallRequest, RepoOutcome, RepoOutcomeStatus,
    InstallResult,
)
from paasctl.version import __version__

__all__ = [
    "PaasctlError", "UsageError", "UnknownRepoError", "DuplicateRepoError",
    "NotAPluginRepoError", "PluginNotFoundError", "PlatformUnsupportedError",
    "NotFoundInAnyRepositoryError", "SourceNotFoundError", "NetworkError",
    "NetworkErrorKind", "HttpError", "RedirectRefusedError", "DecodeError",
    "DigestMismatchError", "UnverifiedArtifactError", "InstallIOError",
    "ConfigError",
    "PluginRepo", "PluginBinary", "PluginIndexEntry", "PluginIndex",
    "ResolvedArtifact", "DownloadedArtifact", "DirectSource", "IndexedSource",
    "NamedRepo", "AnyConfiguredRepo", "InstallRequest", "RepoOutcome",
    "RepoOutcomeStatus", "InstallResult",
    "__version__",
]
