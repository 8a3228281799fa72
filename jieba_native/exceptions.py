"""Error taxonomy for jieba-native.

Every failure of the artifact pipeline is classified at its origin into
exactly one :class:`ErrorKind` and passed upward unchanged. Callers that need
to react per kind read ``error.kind`` instead of chaining ``isinstance`` tests.

Chain preservation: components use ``raise X(...) from cause`` so the
underlying transport, filesystem or import error stays available via
``__cause__``.
"""

from __future__ import annotations

from enum import Enum
from typing import ClassVar


class ErrorKind(str, Enum):
    """One tag per failure class of the startup pipeline."""

    UNSUPPORTED_PLATFORM = "unsupported_platform"
    REGISTRY = "registry"
    DOWNLOAD = "download"
    EXTRACTION = "extraction"
    EXTRACTION_TIMEOUT = "extraction_timeout"
    LOAD = "load"


class JiebaNativeError(Exception):
    """Base for all pipeline errors.

    Attributes:
        kind: Taxonomy tag of the concrete subclass.
        retryable: Whether a later startup attempt may succeed.
    """

    kind: ClassVar[ErrorKind]
    retryable: ClassVar[bool] = False

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r}, kind={self.kind.value!r})"


class UnsupportedPlatformError(JiebaNativeError):
    """No artifact is published for this OS/architecture combination."""

    kind = ErrorKind.UNSUPPORTED_PLATFORM

    def __init__(self, os_name: str, arch_name: str, reason: str) -> None:
        super().__init__(f"{reason}: {os_name}-{arch_name}")
        self.os_name = os_name
        self.arch_name = arch_name
        self.reason = reason


class RegistryError(JiebaNativeError):
    """The registry metadata lookup failed."""

    kind = ErrorKind.REGISTRY

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DownloadError(JiebaNativeError):
    """Transport failure or incomplete transfer.

    Safe to retry on the next process start: a partial archive is
    overwritten by the next fetch.
    """

    kind = ErrorKind.DOWNLOAD
    retryable = True


class ExtractionError(JiebaNativeError):
    """The archive is corrupt or the unpack stream failed."""

    kind = ErrorKind.EXTRACTION


class ExtractionTimeoutError(ExtractionError):
    """The unpack stream did not finish within the configured bound."""

    kind = ErrorKind.EXTRACTION_TIMEOUT

    def __init__(self, message: str, *, timeout: float) -> None:
        super().__init__(message)
        self.timeout = timeout


class LoadError(JiebaNativeError):
    """The native module failed to initialize."""

    kind = ErrorKind.LOAD
