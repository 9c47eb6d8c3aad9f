"""FileDownloader — stream a remote artifact into a staging directory."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from urllib.parse import unquote

import httpx

from paasctl.exceptions import HttpError, InstallIOError, RedirectRefusedError
from paasctl.plugins.transport import build_client, network_error, require_http_url
from paasctl.types import DownloadedArtifact

logger = logging.getLogger(__name__)

# Used when the final URL has no usable last path component
PLACEHOLDER_FILENAME = "downloaded-plugin"

_CHUNK_SIZE = 64 * 1024


class FileDownloader:
    """Downloads http(s) artifacts, following a bounded number of redirects.

    Redirects are followed here rather than by httpx so that an
    https → http downgrade can be refused.

    Args:
        timeout: Per-request timeout in seconds.
        max_redirects: Redirect hops allowed before giving up.
    """

    def __init__(self, timeout: float = 300.0, max_redirects: int = 10) -> None:
        self._timeout = timeout
        self._max_redirects = max_redirects

    async def download(self, url: str, target_dir: Path) -> DownloadedArtifact:
        """Fetch *url* into *target_dir*.

        Returns:
            :class:`DownloadedArtifact` with the local path and exact byte count.

        Raises:
            UsageError: *url* is not an absolute http(s) URL.
            RedirectRefusedError: Too many redirects, or an unsafe redirect target.
            HttpError: Final response is not 2xx.
            NetworkError: Connection, TLS or timeout failure.
            InstallIOError: The file cannot be written.
        """
        require_http_url(url)
        target_dir = Path(target_dir)
        current = httpx.URL(url)
        hops = 0

        async with build_client(self._timeout) as client:
            while True:
                try:
                    async with client.stream("GET", current) as response:
                        if response.is_redirect:
                            current = self._next_hop(current, response, hops)
                            hops += 1
                            continue
                        if not response.is_success:
                            raise HttpError(
                                f"Download of '{current}' failed with HTTP {response.status_code}",
                                url=str(current),
                                status_code=response.status_code,
                            )
                        return await self._save(response, target_dir, url)
                except httpx.RequestError as exc:
                    raise network_error(exc, str(current), context="download") from exc

    def _next_hop(self, current: httpx.URL, response: httpx.Response, hops: int) -> httpx.URL:
        if hops >= self._max_redirects:
            raise RedirectRefusedError(
                f"Stopped after {self._max_redirects} redirects downloading '{current}'",
                url=str(current),
                status_code=response.status_code,
            )
        target = current.join(response.headers["location"])
        if target.scheme not in ("http", "https"):
            raise RedirectRefusedError(
                f"Refusing redirect from '{current}' to unsupported scheme '{target.scheme}'",
                url=str(target),
                status_code=response.status_code,
            )
        if current.scheme == "https" and target.scheme == "http":
            raise RedirectRefusedError(
                f"Refusing insecure redirect from '{current}' to '{target}'",
                url=str(target),
                status_code=response.status_code,
            )
        logger.debug("Following %s redirect: %s -> %s", response.status_code, current, target)
        return target

    async def _save(self, response: httpx.Response, target_dir: Path, source_url: str) -> DownloadedArtifact:
        path = target_dir / filename_from_url(response.url)
        size = 0
        try:
            with path.open("wb") as fh:
                async for chunk in response.aiter_bytes(_CHUNK_SIZE):
                    fh.write(chunk)
                    size += len(chunk)
        except OSError as exc:
            path.unlink(missing_ok=True)
            raise InstallIOError(f"Cannot write '{path}': {exc}", path=str(path)) from exc
        except BaseException:
            # read failures and cancellation leave no partial file behind
            path.unlink(missing_ok=True)
            raise

        logger.info("Downloaded %d bytes from %s to %s", size, response.url, path)
        return DownloadedArtifact(path=path, size=size, source_url=source_url)


def filename_from_url(url: httpx.URL) -> str:
    """Last path component of *url*, or :data:`PLACEHOLDER_FILENAME`.

    Names that are not a safe single file name (``..``, NUL bytes,
    backslashes) also get the placeholder.
    """
    name = PurePosixPath(unquote(url.path)).name
    if name in ("", ".", "..") or "\x00" in name or "\\" in name:
        return PLACEHOLDER_FILENAME
    return name
