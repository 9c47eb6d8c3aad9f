"""RepoIndexClient — fetch a repository's ``/list`` index and resolve plugins in it."""

from __future__ import annotations

import json
import logging
from typing import Union

import httpx
from packaging.version import InvalidVersion, Version
from pydantic import ValidationError

from paasctl.exceptions import (
    DecodeError,
    HttpError,
    NotAPluginRepoError,
    PlatformUnsupportedError,
    PluginNotFoundError,
    UsageError,
)
from paasctl.plugins.transport import build_client, network_error
from paasctl.types import PluginIndex, PluginIndexEntry, PluginRepo, ResolvedArtifact, is_http_url

logger = logging.getLogger(__name__)


def list_url(base_url: str) -> str:
    """Index URL for a repository base URL.

    Examples::

        list_url("http://x.example")   → "http://x.example/list"
        list_url("http://x.example/")  → "http://x.example/list"

    Raises:
        UsageError: *base_url* is not an absolute http(s) URL with a host.
    """
    base = (base_url or "").strip()
    if not is_http_url(base):
        raise UsageError(
            f"{base_url} is not a valid url, please provide a url, e.g. http://your_repo.com"
        )
    return base.rstrip("/") + "/list"


class RepoIndexClient:
    """Fetches plugin indexes. Nothing is cached between calls.

    Args:
        timeout: Per-request timeout in seconds.
    """

    def __init__(self, timeout: float = 30.0) -> None:
        self._timeout = timeout

    async def fetch_index(self, repo: Union[PluginRepo, str]) -> PluginIndex:
        """Fetch and parse ``<repo>/list``.

        Args:
            repo: A configured :class:`PluginRepo` or a bare base URL.

        Raises:
            UsageError: Base URL is not a valid http(s) URL. No request is made.
            NetworkError: Transport failure (``kind`` tells dial/timeout/tls).
            NotAPluginRepoError: HTTP 404, or the body lacks ``plugins``.
            HttpError: Any other non-2xx status.
            DecodeError: Body is not JSON or entries have the wrong shape.
        """
        base = repo.url if isinstance(repo, PluginRepo) else repo
        url = list_url(base)

        logger.debug("Fetching plugin index %s", url)
        try:
            async with build_client(self._timeout, follow_redirects=True) as client:
                response = await client.get(url)
        except httpx.RequestError as exc:
            raise network_error(exc, url) from exc

        if response.status_code == 404:
            raise NotAPluginRepoError(
                f"{url} is not responding. Please make sure it is a valid plugin repo.",
                url=url,
            )
        if not response.is_success:
            raise HttpError(
                f"Request on '{url}' failed with HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
            )
        return parse_index(response.content, url)


def parse_index(payload: bytes, url: str = "") -> PluginIndex:
    """Parse a ``/list`` response body.

    Raises:
        DecodeError: Not JSON, or ``plugins`` entries are malformed.
        NotAPluginRepoError: Valid JSON without a ``plugins`` array.
    """
    try:
        data = json.loads(payload)
    except ValueError as exc:
        raise DecodeError(f"Error processing data from server: {exc}", url=url) from exc

    if not isinstance(data, dict) or data.get("plugins") is None:
        raise NotAPluginRepoError(
            '"Plugins" object not found in the responded data.', url=url
        )

    try:
        return PluginIndex.model_validate(data)
    except ValidationError as exc:
        raise DecodeError(f"Error processing data from server: {exc}", url=url) from exc


def resolve(index: PluginIndex, plugin_name: str, platform: str) -> ResolvedArtifact:
    """Pick the artifact for *plugin_name* on *platform*.

    Name matching is case-sensitive. The highest version that ships a binary
    for *platform* wins; equal versions go to the later index entry. If any
    version is not parseable, the last matching entry in index order wins.

    Raises:
        PluginNotFoundError: No entry named *plugin_name*.
        PlatformUnsupportedError: Entries exist, none for *platform*.
    """
    candidates = [entry for entry in index.plugins if entry.name == plugin_name]
    if not candidates:
        raise PluginNotFoundError(
            f"Plugin '{plugin_name}' not found in repository index",
            plugin_name=plugin_name,
        )

    for entry in _by_preference(candidates):
        binary = entry.binary_for(platform)
        if binary is not None:
            return ResolvedArtifact(
                plugin_name=entry.name,
                version=entry.version,
                platform=platform,
                url=binary.url,
                checksum=binary.checksum,
            )

    available = sorted({b.platform for entry in candidates for b in entry.binaries})
    raise PlatformUnsupportedError(
        f"Plugin '{plugin_name}' is not available for platform '{platform}' "
        f"(available: {', '.join(available) or 'none'})",
        plugin_name=plugin_name,
        platform=platform,
        available=available,
    )


def _by_preference(entries: list[PluginIndexEntry]) -> list[PluginIndexEntry]:
    """Most preferred first: highest version, later position breaks ties."""
    try:
        keyed = [(Version(entry.version), pos, entry) for pos, entry in enumerate(entries)]
    except InvalidVersion:
        return list(reversed(entries))
    keyed.sort(key=lambda item: (item[0], item[1]), reverse=True)
    return [entry for _, _, entry in keyed]
