"""Render paasctl errors as single user-facing messages."""

from rich.markup import escape

from paasctl.exceptions import (
    DigestMismatchError,
    NetworkError,
    NotFoundInAnyRepositoryError,
    PaasctlError,
)

PROXY_TIP = (
    "TIP: If you are behind a firewall and require an HTTP proxy, verify the "
    "https_proxy environment variable is correctly set. Else, check your network connection."
)


def format_error(exc: PaasctlError) -> str:
    """Message for *exc*, markup-escaped for a rich console."""
    lines = [str(exc)]

    if isinstance(exc, NetworkError) and exc.is_dial_failure:
        lines.append(PROXY_TIP)

    if isinstance(exc, NotFoundInAnyRepositoryError):
        for outcome in exc.outcomes:
            lines.append(f"  - {outcome.repo_name}: {outcome.status.value} ({outcome.detail})")

    if isinstance(exc, DigestMismatchError):
        lines.append("The downloaded file was removed. Nothing was installed.")

    return escape("\n".join(lines))
