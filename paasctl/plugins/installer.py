"""Plugin installer — strategies and facade.

The facade owns one staging directory per invocation and picks a strategy
from the request's source:

    DirectSource(location)                      → DirectInstaller
    IndexedSource(name, NamedRepo(repo))        → IndexedInstaller, one repository
    IndexedSource(name, AnyConfiguredRepo())    → IndexedInstaller, every repository in order

The validated artifact is returned to the caller; promotion into the plugin
directory is the plugin host's job (see :mod:`paasctl.plugins.host`).
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import tempfile
from pathlib import Path
from typing import Any, Optional

from paasctl.exceptions import (
    DecodeError,
    DigestMismatchError,
    HttpError,
    InstallIOError,
    NetworkError,
    NetworkErrorKind,
    NotAPluginRepoError,
    NotFoundInAnyRepositoryError,
    PlatformUnsupportedError,
    PluginNotFoundError,
    SourceNotFoundError,
    UnknownRepoError,
    UnverifiedArtifactError,
    UsageError,
)
from paasctl.plugins.checksum import ChecksumVerifier
from paasctl.plugins.downloader import FileDownloader
from paasctl.plugins.platform import current_platform
from paasctl.plugins.repo_index import RepoIndexClient, resolve
from paasctl.types import (
    AnyConfiguredRepo,
    DirectSource,
    DownloadedArtifact,
    IndexedSource,
    InstallRequest,
    InstallResult,
    NamedRepo,
    PluginRepo,
    RepoOutcome,
    RepoOutcomeStatus,
    ResolvedArtifact,
    is_http_url,
)

logger = logging.getLogger(__name__)

_STAGING_PREFIX = "paasctl-plugin-"

# Index-fetch failures that let a multi-repository search move on
_INDEX_SKIP_STATUS: tuple[tuple[type, RepoOutcomeStatus], ...] = (
    (NetworkError, RepoOutcomeStatus.UNREACHABLE),
    (NotAPluginRepoError, RepoOutcomeStatus.NOT_A_PLUGIN_REPO),
    (DecodeError, RepoOutcomeStatus.DECODE_FAILED),
    (HttpError, RepoOutcomeStatus.HTTP_ERROR),
    (UsageError, RepoOutcomeStatus.INVALID_URL),
)


def build_request(
    location: str,
    repo_name: Optional[str] = None,
    all_repos: bool = False,
    platform: Optional[str] = None,
) -> InstallRequest:
    """Build an :class:`InstallRequest` from CLI-style inputs.

    ``repo_name`` of ``None`` or ``""`` means no repository (direct install).

    Raises:
        UsageError: Empty *location*, or both *repo_name* and *all_repos*.
    """
    location = (location or "").strip()
    if not location:
        raise UsageError("Incorrect Usage. Requires a plugin path, URL or name as argument")
    if repo_name and all_repos:
        raise UsageError("Use either a repository name or --all-repos, not both")

    if repo_name:
        source = IndexedSource(plugin_name=location, repo=NamedRepo(name=repo_name.strip()))
    elif all_repos:
        source = IndexedSource(plugin_name=location, repo=AnyConfiguredRepo())
    else:
        source = DirectSource(location=location)
    return InstallRequest(source=source, platform=platform or current_platform())


# ─── Strategies ───────────────────────────────────────────────────────────────


class DirectInstaller:
    """Installs from an http(s) URL or a local file. No digest is available."""

    def __init__(self, downloader: FileDownloader) -> None:
        self._downloader = downloader

    async def fetch(self, source: DirectSource, staging_dir: Path) -> InstallResult:
        if is_http_url(source.location):
            artifact = await self._downloader.download(source.location, staging_dir)
        else:
            artifact = self._stage_local(source.location, staging_dir)

        return InstallResult(
            artifact=artifact,
            staging_dir=staging_dir,
            plugin_name=artifact.path.name,
            checksum_verified=False,
        )

    @staticmethod
    def _stage_local(location: str, staging_dir: Path) -> DownloadedArtifact:
        """Copy a local file into staging so cleanup never touches the original."""
        path = Path(location).expanduser()
        if not path.is_file():
            raise SourceNotFoundError(
                f"File not found locally, make sure the file exists at given path {location}",
                location=location,
            )
        staged = staging_dir / path.name
        try:
            shutil.copyfile(path, staged)
        except OSError as exc:
            raise InstallIOError(f"Cannot stage '{path}': {exc}", path=str(path)) from exc
        return DownloadedArtifact(path=staged, size=staged.stat().st_size)


class IndexedInstaller:
    """Installs a plugin by name from repository indexes.

    Args:
        index_client: Fetches ``<repo>/list``.
        downloader: Streams the resolved binary into staging.
        verifier: Checks the binary against the published digest.
        require_checksum: Refuse binaries whose index entry has no digest.
    """

    def __init__(
        self,
        index_client: RepoIndexClient,
        downloader: FileDownloader,
        verifier: ChecksumVerifier,
        require_checksum: bool = False,
    ) -> None:
        self._index_client = index_client
        self._downloader = downloader
        self._verifier = verifier
        self._require_checksum = require_checksum

    async def fetch(
        self,
        source: IndexedSource,
        repos: list[PluginRepo],
        platform: str,
        staging_dir: Path,
    ) -> InstallResult:
        if isinstance(source.repo, NamedRepo):
            repo = _find_repo(repos, source.repo.name)
            return await self._from_repo(repo, source.plugin_name, platform, staging_dir)
        return await self._search_all(repos, source.plugin_name, platform, staging_dir)

    async def _from_repo(
        self,
        repo: PluginRepo,
        plugin_name: str,
        platform: str,
        staging_dir: Path,
    ) -> InstallResult:
        """Named-repository path: every failure surfaces directly."""
        index = await self._index_client.fetch_index(repo)
        try:
            resolved = resolve(index, plugin_name, platform)
        except PluginNotFoundError as exc:
            exc.repo_name = repo.name
            raise
        return await self._download_verified(resolved, repo, staging_dir)

    async def _search_all(
        self,
        repos: list[PluginRepo],
        plugin_name: str,
        platform: str,
        staging_dir: Path,
    ) -> InstallResult:
        """Visit repositories in configured order; the first full success wins."""
        skipped: list[RepoOutcome] = []

        for repo in repos:
            try:
                index = await self._index_client.fetch_index(repo)
            except (NetworkError, NotAPluginRepoError, DecodeError, HttpError, UsageError) as exc:
                skipped.append(_outcome(repo, _index_status(exc), exc))
                logger.warning("Skipping plugin repo '%s': %s", repo.name, exc)
                continue

            try:
                resolved = resolve(index, plugin_name, platform)
            except PlatformUnsupportedError as exc:
                skipped.append(_outcome(repo, RepoOutcomeStatus.PLATFORM_UNSUPPORTED, exc))
                logger.info("Plugin repo '%s': %s", repo.name, exc)
                continue
            except PluginNotFoundError as exc:
                skipped.append(_outcome(repo, RepoOutcomeStatus.PLUGIN_NOT_FOUND, exc))
                logger.info("Plugin repo '%s': %s", repo.name, exc)
                continue

            try:
                result = await self._download_verified(resolved, repo, staging_dir)
            except (NetworkError, HttpError, UsageError) as exc:
                skipped.append(_outcome(repo, RepoOutcomeStatus.DOWNLOAD_FAILED, exc))
                logger.warning(
                    "Download of '%s' from plugin repo '%s' failed: %s",
                    plugin_name, repo.name, exc,
                )
                continue
            # DigestMismatchError / UnverifiedArtifactError propagate: a bad
            # candidate must not be masked by a later repository.

            return result.model_copy(update={"skipped": skipped})

        searched = ", ".join(r.name for r in repos) or "none configured"
        raise NotFoundInAnyRepositoryError(
            f"Plugin '{plugin_name}' not found in any plugin repo (searched: {searched})",
            plugin_name=plugin_name,
            outcomes=skipped,
        )

    async def _download_verified(
        self,
        resolved: ResolvedArtifact,
        repo: PluginRepo,
        staging_dir: Path,
    ) -> InstallResult:
        if not resolved.checksum and self._require_checksum:
            raise UnverifiedArtifactError(
                f"Plugin repo '{repo.name}' publishes no checksum for '{resolved.plugin_name}' "
                f"v{resolved.version}; refusing unverified install",
                plugin_name=resolved.plugin_name,
            )

        artifact = await self._downloader.download(resolved.url, staging_dir)
        try:
            verified = self._verifier.verify(artifact.path, resolved.checksum)
        except DigestMismatchError:
            artifact.path.unlink(missing_ok=True)
            logger.error(
                "Checksum mismatch for '%s' v%s from plugin repo '%s'; file removed",
                resolved.plugin_name, resolved.version, repo.name,
            )
            raise

        if not verified:
            logger.info(
                "Plugin repo '%s' publishes no checksum for '%s' v%s; installed unverified",
                repo.name, resolved.plugin_name, resolved.version,
            )

        return InstallResult(
            artifact=artifact,
            staging_dir=staging_dir,
            plugin_name=resolved.plugin_name,
            version=resolved.version,
            repo_name=repo.name,
            checksum_verified=verified,
        )


# ─── Facade ───────────────────────────────────────────────────────────────────


class PluginInstaller:
    """Entry point for installs.

    Args:
        repo_store: Anything with ``list_repositories() -> list[PluginRepo]``;
            read once per install as a snapshot.
        index_client: Defaults to a :class:`RepoIndexClient`.
        downloader: Defaults to a :class:`FileDownloader`.
        verifier: Defaults to a :class:`ChecksumVerifier`.
        require_checksum: Refuse indexed installs without a published digest.
        staging_root: Parent directory for staging dirs (system temp if None).
    """

    def __init__(
        self,
        repo_store: Any,
        index_client: Optional[RepoIndexClient] = None,
        downloader: Optional[FileDownloader] = None,
        verifier: Optional[ChecksumVerifier] = None,
        require_checksum: bool = False,
        staging_root: Optional[Path] = None,
    ) -> None:
        self._repo_store = repo_store
        downloader = downloader or FileDownloader()
        self._direct = DirectInstaller(downloader)
        self._indexed = IndexedInstaller(
            index_client or RepoIndexClient(),
            downloader,
            verifier or ChecksumVerifier(),
            require_checksum=require_checksum,
        )
        self._staging_root = staging_root

    async def install(self, request: InstallRequest, deadline: Optional[float] = None) -> InstallResult:
        """Run one install.

        On success the artifact stays in ``result.staging_dir`` until the
        host registers it (or :meth:`discard` is called). On any other exit,
        including cancellation, the staging directory is removed.

        Args:
            request: What to install.
            deadline: Overall time budget in seconds; ``None`` = no limit.

        Raises:
            PaasctlError: Any category from :mod:`paasctl.exceptions`.
        """
        repos = (
            self._repo_store.list_repositories()
            if isinstance(request.source, IndexedSource)
            else []
        )
        staging_dir = self._make_staging_dir()

        try:
            work = self._run(request, repos, staging_dir)
            if deadline is not None:
                result = await asyncio.wait_for(work, timeout=deadline)
            else:
                result = await work
        except asyncio.TimeoutError as exc:
            _remove_dir(staging_dir)
            raise NetworkError(
                f"Plugin install did not finish within {deadline}s",
                kind=NetworkErrorKind.TIMEOUT,
                cause=exc,
            ) from exc
        except OSError as exc:
            _remove_dir(staging_dir)
            raise InstallIOError(f"Plugin install failed: {exc}", path=str(staging_dir)) from exc
        except BaseException:
            _remove_dir(staging_dir)
            raise

        logger.info(
            "Plugin artifact ready at %s (%d bytes, verified=%s)",
            result.artifact.path, result.artifact.size, result.checksum_verified,
        )
        return result

    def discard(self, result: InstallResult) -> None:
        """Drop a successful result the caller decided not to register."""
        _remove_dir(result.staging_dir)

    async def _run(self, request: InstallRequest, repos: list[PluginRepo], staging_dir: Path) -> InstallResult:
        source = request.source
        if isinstance(source, DirectSource):
            return await self._direct.fetch(source, staging_dir)
        return await self._indexed.fetch(source, repos, request.platform, staging_dir)

    def _make_staging_dir(self) -> Path:
        try:
            if self._staging_root is not None:
                Path(self._staging_root).mkdir(parents=True, exist_ok=True)
            return Path(tempfile.mkdtemp(prefix=_STAGING_PREFIX, dir=self._staging_root))
        except OSError as exc:
            raise InstallIOError(
                f"Cannot create staging directory: {exc}", path=str(self._staging_root or "")
            ) from exc


# ─── Module-level helpers ─────────────────────────────────────────────────────


def _find_repo(repos: list[PluginRepo], name: str) -> PluginRepo:
    for repo in repos:
        if repo.same_name(name):
            return repo
    raise UnknownRepoError(f"Plugin repo '{name}' does not exist", repo_name=name)


def _index_status(exc: Exception) -> RepoOutcomeStatus:
    for exc_type, status in _INDEX_SKIP_STATUS:
        if isinstance(exc, exc_type):
            return status
    return RepoOutcomeStatus.UNREACHABLE


def _outcome(repo: PluginRepo, status: RepoOutcomeStatus, exc: Exception) -> RepoOutcome:
    return RepoOutcome(repo_name=repo.name, url=repo.url, status=status, detail=str(exc))


def _remove_dir(path: Path) -> None:
    shutil.rmtree(path, ignore_errors=True)
