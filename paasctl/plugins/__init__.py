"""Plugin acquisition and installation — public API surface."""

from paasctl.plugins.checksum import ChecksumVerifier
from paasctl.plugins.downloader import FileDownloader
from paasctl.plugins.host import PluginHost
from paasctl.plugins.installer import (
    DirectInstaller,
    IndexedInstaller,
    PluginInstaller,
    build_request,
)
from paasctl.plugins.platform import current_platform
from paasctl.plugins.repo_index import RepoIndexClient, list_url, parse_index, resolve
from paasctl.plugins.repos import PluginRepoManager

__all__ = [
    "ChecksumVerifier",
    "FileDownloader",
    "PluginHost",
    "DirectInstaller",
    "IndexedInstaller",
    "PluginInstaller",
    "build_request",
    "current_platform",
    "RepoIndexClient",
    "list_url",
    "parse_index",
    "resolve",
    "PluginRepoManager",
]
