"""Platform resolution: (OS, architecture, libc) -> artifact identifier.

The table below uses the registry's platform vocabulary and must list
exactly the combinations the registry publishes. Matching is exact and
case-sensitive; anything outside the table is rejected, never defaulted.
"""

from __future__ import annotations

import logging
import platform
import sys
from collections.abc import Callable
from dataclasses import dataclass

from jieba_native.exceptions import UnsupportedPlatformError
from jieba_native.libc import is_musl_libc

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LibcVariants:
    """Artifact names for an architecture published for both C libraries."""

    musl: str
    gnu: str


PLATFORM_ARCH_MAP: dict[str, dict[str, str | LibcVariants]] = {
    "android": {
        "arm64": "jieba.android-arm64",
        "arm": "jieba.android-arm-eabi",
    },
    "win32": {
        "x64": "jieba.win32-x64-msvc",
        "ia32": "jieba.win32-ia32-msvc",
        "arm64": "jieba.win32-arm64-msvc",
    },
    "darwin": {
        "x64": "jieba.darwin-x64",
        "arm64": "jieba.darwin-arm64",
    },
    "freebsd": {
        "x64": "jieba.freebsd-x64",
    },
    "linux": {
        "x64": LibcVariants(musl="jieba.linux-x64-musl", gnu="jieba.linux-x64-gnu"),
        "arm64": LibcVariants(musl="jieba.linux-arm64-musl", gnu="jieba.linux-arm64-gnu"),
        "arm": "jieba.linux-arm-gnueabihf",
        "riscv64": "jieba.linux-riscv64-gnu",
        "ppc64": "jieba.linux-ppc64-gnu",
        "s390x": "jieba.linux-s390x-gnu",
    },
}

# Python runtime identifiers -> registry vocabulary
_MACHINE_TO_ARCH = {
    "x86_64": "x64",
    "amd64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
    "armv8l": "arm",
    "arm": "arm",
    "i386": "ia32",
    "i686": "ia32",
    "x86": "ia32",
    "riscv64": "riscv64",
    "ppc64": "ppc64",
    "ppc64le": "ppc64",
    "s390x": "s390x",
}


@dataclass(frozen=True)
class PlatformKey:
    """The (OS, architecture, libc) triple identifying the artifact a host needs."""

    os: str
    arch: str
    libc: str | None = None

    def __str__(self) -> str:
        parts = [self.os, self.arch]
        if self.libc:
            parts.append(self.libc)
        return "-".join(parts)


def detect_platform() -> PlatformKey:
    """Describe the running interpreter in the registry's vocabulary.

    Identifiers without a translation are passed through unchanged so that
    :func:`resolve` rejects them with the host's own spelling.
    """
    if hasattr(sys, "getandroidapilevel"):
        os_name = "android"
    elif sys.platform.startswith("freebsd"):
        os_name = "freebsd"
    else:
        os_name = sys.platform

    machine = platform.machine()
    arch_name = _MACHINE_TO_ARCH.get(machine.lower(), machine)
    return PlatformKey(os=os_name, arch=arch_name)


def resolve(
    os_name: str,
    arch_name: str,
    *,
    probe_musl: Callable[[], bool] = is_musl_libc,
) -> str:
    """Map an OS/architecture pair to its artifact identifier.

    Args:
        os_name: OS in registry vocabulary (``linux``, ``win32``...).
        arch_name: Architecture in registry vocabulary (``x64``, ``arm64``...).
        probe_musl: Libc prober, consulted only for dual-libc Linux entries.

    Returns:
        The artifact identifier, e.g. ``jieba.linux-x64-gnu``.

    Raises:
        UnsupportedPlatformError: If the OS or the architecture is not published.
    """
    arch_map = PLATFORM_ARCH_MAP.get(os_name)
    if arch_map is None:
        raise UnsupportedPlatformError(os_name, arch_name, "unsupported operating system")

    entry = arch_map.get(arch_name)
    if entry is None:
        raise UnsupportedPlatformError(os_name, arch_name, "unsupported architecture")

    if isinstance(entry, LibcVariants):
        musl = probe_musl()
        logger.debug(f"Detected {'musl' if musl else 'glibc'} on {os_name}-{arch_name}")
        return entry.musl if musl else entry.gnu
    return entry


def libc_of(artifact_id: str) -> str | None:
    """Return ``musl`` or ``gnu`` for dual-libc artifacts, else None."""
    for arch_map in PLATFORM_ARCH_MAP.values():
        for entry in arch_map.values():
            if isinstance(entry, LibcVariants):
                if artifact_id == entry.musl:
                    return "musl"
                if artifact_id == entry.gnu:
                    return "gnu"
    return None


def package_name(artifact_id: str) -> str:
    """Registry package name of an artifact: ``jieba.linux-x64-gnu`` -> ``jieba-linux-x64-gnu``."""
    return artifact_id.replace(".", "-", 1)
