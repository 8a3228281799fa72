"""C library flavor detection for Linux hosts.

Two independent strategies:

1. The structured runtime report: ``os.confstr("CS_GNU_LIBC_VERSION")``.
   glibc answers with its version; musl has no such field.
2. When the report facility is unavailable, read the ``ldd`` helper found
   on ``PATH`` and look for the ``musl`` marker.

The answer is advisory. A wrong guess downloads the wrong artifact, which
then fails in the loader; it never aborts detection itself. When neither
strategy can produce an answer the prober assumes musl.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable
from pathlib import Path

logger = logging.getLogger(__name__)

GLIBC_VERSION_FIELD = "glibc_version_runtime"
MUSL_MARKER = b"musl"


class ReportUnavailableError(Exception):
    """The runtime report facility does not exist on this interpreter."""


def runtime_report() -> dict[str, str]:
    """Build the runtime diagnostic report consulted by the primary strategy.

    Raises:
        ReportUnavailableError: If ``os.confstr`` or the libc name is missing.
    """
    confstr = getattr(os, "confstr", None)
    if confstr is None or "CS_GNU_LIBC_VERSION" not in getattr(os, "confstr_names", {}):
        raise ReportUnavailableError("os.confstr(CS_GNU_LIBC_VERSION) is not available")

    report: dict[str, str] = {}
    try:
        value = confstr("CS_GNU_LIBC_VERSION")
    except (OSError, ValueError):
        # musl rejects the name outright
        value = None
    if value and value.startswith("glibc"):
        report[GLIBC_VERSION_FIELD] = value.split(" ", 1)[-1]
    return report


def locate_ldd() -> Path | None:
    found = shutil.which("ldd")
    return Path(found) if found else None


def is_musl_libc(
    report: Callable[[], dict[str, str]] = runtime_report,
    ldd: Callable[[], Path | None] = locate_ldd,
) -> bool:
    """Return True when the running system links against musl.

    Args:
        report: Primary strategy. Returns the runtime report or raises
            :class:`ReportUnavailableError`.
        ldd: Fallback strategy. Returns the path of the dynamic loader
            helper, or None if it is not on the search path.

    Returns:
        True for musl (also the conservative default), False for glibc.
    """
    try:
        data = report()
    except ReportUnavailableError as e:
        logger.debug(f"Runtime report unavailable, inspecting ldd instead: {e}")
    else:
        return not data.get(GLIBC_VERSION_FIELD)

    ldd_path = ldd()
    if ldd_path is None:
        logger.debug("ldd not found on PATH, assuming musl")
        return True
    try:
        return MUSL_MARKER in ldd_path.read_bytes()
    except OSError as e:
        logger.debug(f"Could not read {ldd_path}, assuming musl: {e}")
        return True
