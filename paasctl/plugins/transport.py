"""Shared httpx client construction and transport-error classification."""

from __future__ import annotations

import ssl

import httpx

from paasctl.exceptions import NetworkError, NetworkErrorKind, UsageError
from paasctl.types import is_http_url
from paasctl.version import __version__

USER_AGENT = f"paasctl/{__version__}"


def build_client(timeout: float, follow_redirects: bool = False) -> httpx.AsyncClient:
    """AsyncClient honouring the ambient trust store and proxy environment."""
    return httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=follow_redirects,
        trust_env=True,
        headers={"User-Agent": USER_AGENT},
    )


def require_http_url(value: str) -> str:
    """Raises:
        UsageError: *value* is not an absolute http(s) URL.
    """
    if not is_http_url(value):
        raise UsageError(
            f"{value} is not a valid url, please provide a url, e.g. http://your_repo.com"
        )
    return value


def network_error(exc: httpx.RequestError, url: str, context: str = "") -> NetworkError:
    """Translate an httpx request failure into a :class:`NetworkError`.

    Connect failures are tagged ``dial`` so the UI can add the proxy hint;
    certificate problems surface as ``tls``.
    """
    root = _root_cause(exc)
    if isinstance(exc, httpx.TimeoutException):
        kind = NetworkErrorKind.TIMEOUT
    elif isinstance(root, ssl.SSLError):
        kind = NetworkErrorKind.TLS
    elif isinstance(exc, httpx.ConnectError):
        kind = NetworkErrorKind.DIAL
    else:
        kind = NetworkErrorKind.TRANSPORT

    label = f"{context} " if context else ""
    return NetworkError(
        f"There is an error performing {label}request on '{url}': {str(exc) or type(exc).__name__}",
        url=url,
        kind=kind,
        cause=root,
    )


def _root_cause(exc: BaseException) -> BaseException:
    seen = set()
    while exc.__cause__ is not None and id(exc) not in seen:
        seen.add(id(exc))
        exc = exc.__cause__
    return exc
