"""Fetcher: stream a remote archive to a fixed file on local disk."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import httpx

from jieba_native.exceptions import DownloadError

ARCHIVE_NAME = "jieba.tgz"
CHUNK_SIZE = 64 * 1024

ProgressCallback = Callable[[int, int | None], None]


class DownloadStatus(str, Enum):
    COMPLETE = "complete"
    ABORTED = "aborted"


@dataclass(frozen=True)
class DownloadReport:
    """Outcome of one fetch. Consumed by the extractor, never persisted."""

    status: DownloadStatus
    path: Path
    bytes_received: int
    bytes_expected: int | None = None

    @property
    def complete(self) -> bool:
        return self.status is DownloadStatus.COMPLETE

    def raise_for_status(self) -> None:
        """Raise DownloadError unless the transfer reached completion."""
        if not self.complete:
            raise DownloadError(
                f"Download of {self.path.name} aborted after {self.bytes_received}"
                f" of {self.bytes_expected if self.bytes_expected is not None else '?'} bytes"
            )


class Fetcher:
    """Streams a URL into ``<destination>/jieba.tgz``.

    The file name is fixed rather than taken from the URL, which comes from
    untrusted registry metadata. An existing file is overwritten.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        on_progress: ProgressCallback | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self._on_progress = on_progress
        self._logger = logger or logging.getLogger(__name__)

    async def fetch(self, url: str, destination: Path) -> DownloadReport:
        """Download ``url`` into ``destination``.

        Returns:
            A report whose status is ``ABORTED`` when the body ended before
            ``Content-Length`` bytes arrived.

        Raises:
            DownloadError: On transport, HTTP status or filesystem failure.
        """
        target = destination / ARCHIVE_NAME
        received = 0
        expected: int | None = None

        self._logger.info(f"Downloading {url}")
        try:
            async with self._client.stream("GET", url) as response:
                response.raise_for_status()
                expected = _content_length(response)
                with open(target, "wb") as f:
                    async for chunk in response.aiter_bytes(CHUNK_SIZE):
                        f.write(chunk)
                        received += len(chunk)
                        self._report_progress(received, expected)
        except httpx.HTTPStatusError as e:
            raise DownloadError(f"Download failed with HTTP {e.response.status_code}: {url}") from e
        except httpx.HTTPError as e:
            raise DownloadError(f"Download failed for {url}: {e}") from e
        except OSError as e:
            raise DownloadError(f"Could not write {target}: {e}") from e

        status = DownloadStatus.COMPLETE
        if expected is not None and received < expected:
            status = DownloadStatus.ABORTED
        self._logger.debug(f"Download {status.value}: {received} bytes -> {target}")
        return DownloadReport(status=status, path=target, bytes_received=received, bytes_expected=expected)

    def _report_progress(self, received: int, expected: int | None) -> None:
        if self._on_progress is None:
            return
        try:
            self._on_progress(received, expected)
        except Exception as e:
            self._logger.debug(f"Progress callback failed (ignored): {e}")


def _content_length(response: httpx.Response) -> int | None:
    value = response.headers.get("content-length")
    # aiter_bytes yields the decoded body; the header counts encoded bytes
    if value is None or response.headers.get("content-encoding") not in (None, "identity"):
        return None
    try:
        return int(value)
    except ValueError:
        return None
