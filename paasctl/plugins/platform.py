"""Host platform tag, matched exactly against ``binaries[].platform`` in indexes."""

import platform as _platform
import struct
import sys


def current_platform(override: str = "") -> str:
    """Return the platform tag for this host.

    Tags: ``osx``, ``win32``, ``win64``, ``linux32``, ``linux64``,
    ``linux_arm64``. A non-empty *override* is returned unchanged.
    """
    if override:
        return override

    bits = struct.calcsize("P") * 8
    machine = _platform.machine().lower()

    if sys.platform == "darwin":
        return "osx"
    if sys.platform.startswith("win"):
        return "win64" if bits == 64 else "win32"
    if machine in ("aarch64", "arm64") and bits == 64:
        return "linux_arm64"
    return "linux64" if bits == 64 else "linux32"
