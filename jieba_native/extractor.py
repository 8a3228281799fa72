"""Extractor: gunzip and untar a fetched archive next to itself."""

from __future__ import annotations

import asyncio
import logging
import shutil
import tarfile
import tempfile
import threading
import zlib
from pathlib import Path

from jieba_native.exceptions import ExtractionError
from jieba_native.exceptions import ExtractionTimeoutError

DEFAULT_EXTRACTION_TIMEOUT = 300.0
STAGING_PREFIX = ".extract-"


class Extractor:
    """Unpacks ``<dir>/jieba.tgz`` into ``<dir>``.

    Decompression and unpacking are two chained streams (``tarfile`` stream
    mode ``r|gz``) consumed in a worker thread; the caller awaits them as one
    unit. The wait is bounded by ``timeout`` seconds, ``None`` disables it.

    Members land in a hidden staging directory first and are moved into
    ``<dir>`` only after the whole stream was read, so a failed or timed out
    run never leaves a partial ``package/`` behind.
    """

    def __init__(
        self,
        timeout: float | None = DEFAULT_EXTRACTION_TIMEOUT,
        logger: logging.Logger | None = None,
    ) -> None:
        self.timeout = timeout
        self._logger = logger or logging.getLogger(__name__)

    async def extract(self, archive_path: Path) -> None:
        """Extract ``archive_path`` into its parent directory.

        Raises:
            ExtractionError: If decompression or unpacking fails.
            ExtractionTimeoutError: If the stream does not finish in time.
        """
        destination = archive_path.parent
        self._logger.info(f"Extracting {archive_path.name} into {destination}")

        # Remove staging left by an earlier crashed or timed out run
        for stale in destination.glob(f"{STAGING_PREFIX}*"):
            shutil.rmtree(stale, ignore_errors=True)

        try:
            staging = Path(tempfile.mkdtemp(prefix=STAGING_PREFIX, dir=destination))
        except OSError as e:
            raise ExtractionError(f"Cannot create staging directory in {destination}: {e}") from e

        cancelled = threading.Event()
        try:
            await asyncio.wait_for(
                asyncio.to_thread(_unpack, archive_path, staging, cancelled),
                timeout=self.timeout,
            )
            _promote(staging, destination)
        except TimeoutError as e:
            # The worker cannot be killed; it stops at the next member and removes staging itself
            cancelled.set()
            raise ExtractionTimeoutError(
                f"Extraction of {archive_path} did not finish within {self.timeout}s",
                timeout=self.timeout or 0.0,
            ) from e
        except (tarfile.TarError, zlib.error, EOFError, OSError) as e:
            shutil.rmtree(staging, ignore_errors=True)
            raise ExtractionError(f"Failed to extract {archive_path}: {e}") from e
        self._logger.debug(f"Extraction of {archive_path.name} finished")


def _unpack(archive_path: Path, staging: Path, cancelled: threading.Event) -> None:
    try:
        with tarfile.open(archive_path, mode="r|gz") as tar:
            for member in tar:
                if cancelled.is_set():
                    break
                tar.extract(member, staging, filter="data")
    finally:
        if cancelled.is_set():
            shutil.rmtree(staging, ignore_errors=True)


def _promote(staging: Path, destination: Path) -> None:
    """Replace each top-level entry of ``destination`` with its staged copy."""
    for entry in staging.iterdir():
        target = destination / entry.name
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        elif target.exists() or target.is_symlink():
            target.unlink()
        entry.rename(target)
    staging.rmdir()
