"""PluginRepoManager — add, remove and browse configured plugin repositories."""

from __future__ import annotations

import logging
from typing import Optional, Union

from paasctl.config.store import RepoConfigStore
from paasctl.exceptions import (
    DecodeError,
    DuplicateRepoError,
    HttpError,
    NetworkError,
    NotAPluginRepoError,
    UsageError,
)
from paasctl.plugins.repo_index import RepoIndexClient, list_url
from paasctl.types import PluginIndex, PluginRepo

logger = logging.getLogger(__name__)

# One repository's listing: either its parsed index or the error fetching it
RepoListing = tuple[PluginRepo, Union[PluginIndex, Exception]]


class PluginRepoManager:
    """Repository registration with a pre-flight index fetch.

    Args:
        store: Persisted repository list.
        index_client: Used for pre-flight and for browsing indexes.
    """

    def __init__(self, store: RepoConfigStore, index_client: Optional[RepoIndexClient] = None) -> None:
        self._store = store
        self._index_client = index_client or RepoIndexClient()

    async def add(self, name: str, url: str) -> PluginRepo:
        """Register a repository after checking that it serves a valid index.

        Sequence:
            1. Validate name and URL (no network I/O on failure)
            2. Duplicate detection: name case-insensitive, URL
            3. Fetch ``<url>/list`` once
            4. Persist

        Raises:
            UsageError: Empty name or non-http(s) URL.
            DuplicateRepoError: Name or URL already configured.
            NetworkError, HttpError, NotAPluginRepoError, DecodeError:
                Pre-flight failed; nothing is persisted.
        """
        name = (name or "").strip()
        url = (url or "").strip()
        if not name:
            raise UsageError("Incorrect Usage. Requires REPO_NAME and URL as arguments")
        list_url(url)

        self._check_duplicate(name, url)

        await self._index_client.fetch_index(url)

        repo = PluginRepo(name=name, url=url)
        self._store.add_repository(repo)
        return repo

    def remove(self, name: str) -> PluginRepo:
        """Raises:
            UnknownRepoError: No repository with that name.
        """
        return self._store.remove_repository(name)

    def list_repos(self) -> list[PluginRepo]:
        return self._store.list_repositories()

    async def list_plugins(self, repo_name: Optional[str] = None) -> list[RepoListing]:
        """Fetch the index of one repository (by name) or of all, sequentially.

        Per-repository fetch failures are returned in place of the index so
        one broken repository does not hide the others.

        Raises:
            UnknownRepoError: *repo_name* is not configured.
        """
        repos = [self._store.find(repo_name)] if repo_name else self._store.list_repositories()

        listings: list[RepoListing] = []
        for repo in repos:
            try:
                index = await self._index_client.fetch_index(repo)
            except (NetworkError, HttpError, NotAPluginRepoError, DecodeError) as exc:
                logger.warning("Could not fetch plugin index of '%s': %s", repo.name, exc)
                listings.append((repo, exc))
                continue
            listings.append((repo, index))
        return listings

    def _check_duplicate(self, name: str, url: str) -> None:
        for repo in self._store.list_repositories():
            if repo.same_name(name):
                raise DuplicateRepoError(
                    f'Plugin repo named "{name}" already exists, please use another name.',
                    repo_name=repo.name,
                    url=repo.url,
                )
            if repo.same_url(url):
                raise DuplicateRepoError(
                    f"{repo.url} ({repo.name}) already exists.",
                    repo_name=repo.name,
                    url=repo.url,
                )
