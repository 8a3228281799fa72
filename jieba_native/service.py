"""Jieba service: install the native artifact on first use and forward calls.

Startup is one ordered pass through::

    UNINITIALIZED -> RESOLVING -> [DOWNLOADING -> EXTRACTING] -> LOADING -> READY

The download and extraction steps are skipped when the artifact already sits
in the install directory. Any failure ends in FAILED and is re-raised; there
is no retry loop.

Constraint: the presence check is not atomic with the download, so two
processes must not start against the same install directory at once.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from collections.abc import Callable
from enum import Enum
from pathlib import Path

import httpx

from jieba_native.config import JiebaConfig
from jieba_native.exceptions import ErrorKind
from jieba_native.exceptions import ExtractionError
from jieba_native.exceptions import JiebaNativeError
from jieba_native.exceptions import LoadError
from jieba_native.extractor import Extractor
from jieba_native.fetcher import Fetcher
from jieba_native.fetcher import ProgressCallback
from jieba_native.libc import is_musl_libc
from jieba_native.loader import BinaryLoader
from jieba_native.loader import Segmenter
from jieba_native.models import Keyword
from jieba_native.models import TaggedWord
from jieba_native.platforms import PlatformKey
from jieba_native.platforms import detect_platform
from jieba_native.platforms import libc_of
from jieba_native.platforms import resolve
from jieba_native.registry import ArtifactLocator

NATIVE_SUFFIX = ".node"

FAILURE_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.UNSUPPORTED_PLATFORM: "The jieba service is not available on this system",
    ErrorKind.REGISTRY: "Could not look up the jieba binary in the package registry",
    ErrorKind.DOWNLOAD: "Error while downloading the jieba binary, check the log for details",
    ErrorKind.EXTRACTION: "The downloaded jieba archive could not be unpacked",
    ErrorKind.EXTRACTION_TIMEOUT: "Unpacking the jieba archive timed out",
    ErrorKind.LOAD: "Error while loading the jieba native binding",
}


class ServiceState(str, Enum):
    UNINITIALIZED = "uninitialized"
    RESOLVING = "resolving"
    DOWNLOADING = "downloading"
    EXTRACTING = "extracting"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class JiebaService:
    """Host-managed segmentation service.

    Owns the configuration and the install directory, runs the artifact
    pipeline in :meth:`start`, then forwards segmentation calls to the
    activated native binding.

    Collaborators can be injected for tests; by default each is built from
    the configuration. ``client`` is borrowed and never closed here.
    """

    name = "jieba"

    def __init__(
        self,
        config: JiebaConfig | None = None,
        base_dir: Path | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        platform_key: PlatformKey | None = None,
        probe_musl: Callable[[], bool] = is_musl_libc,
        locator: ArtifactLocator | None = None,
        fetcher: Fetcher | None = None,
        extractor: Extractor | None = None,
        loader: BinaryLoader | None = None,
        on_progress: ProgressCallback | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.config = config or JiebaConfig()
        self.base_dir = base_dir or Path.cwd()
        self._client = client
        self._platform_key = platform_key
        self._probe_musl = probe_musl
        self._locator = locator
        self._fetcher = fetcher
        self._extractor = extractor or Extractor(timeout=self.config.extraction_timeout, logger=logger)
        self._loader = loader or BinaryLoader(logger=logger)
        self._on_progress = on_progress
        self._logger = logger or logging.getLogger(__name__)

        self.state = ServiceState.UNINITIALIZED
        self.platform: PlatformKey | None = None
        self.artifact_id: str | None = None
        self._segmenter: Segmenter | None = None

    @property
    def install_dir(self) -> Path:
        return self.config.resolve_install_dir(self.base_dir)

    def artifact_path(self, artifact_id: str) -> Path:
        return self.install_dir / "package" / f"{artifact_id}{NATIVE_SUFFIX}"

    @property
    def ready(self) -> bool:
        return self.state is ServiceState.READY

    async def start(self) -> None:
        """Resolve, fetch if needed, load and activate the native binding.

        Raises:
            JiebaNativeError: The classified failure, after logging it.
        """
        try:
            await self._run()
        except JiebaNativeError as e:
            self.state = ServiceState.FAILED
            self._logger.error(f"{FAILURE_MESSAGES[e.kind]}: {e}")
            raise
        except Exception as e:
            self.state = ServiceState.FAILED
            self._logger.error(f"Unexpected failure while starting the jieba service: {e}", exc_info=True)
            raise
        self.state = ServiceState.READY
        self._logger.info(f"Jieba service started ({self.artifact_id})")

    async def _run(self) -> None:
        self.state = ServiceState.RESOLVING
        key = self._platform_key or detect_platform()
        artifact_id = resolve(key.os, key.arch, probe_musl=self._probe_musl)
        self.artifact_id = artifact_id
        self.platform = PlatformKey(os=key.os, arch=key.arch, libc=libc_of(artifact_id))
        self._logger.debug(f"Platform {self.platform} -> {artifact_id}")

        install_dir = self.install_dir
        install_dir.mkdir(parents=True, exist_ok=True)

        module_path = self.artifact_path(artifact_id)
        if module_path.exists():
            self._logger.debug(f"Using existing artifact {module_path}")
        else:
            async with self._http_client() as client:
                await self._acquire(artifact_id, install_dir, client)

        self.state = ServiceState.LOADING
        binding = await asyncio.to_thread(self._loader.load, module_path)
        dict_data = self._read_dictionary(self.config.dict_path)
        idf_data = self._read_dictionary(self.config.idf_path)
        self._segmenter = await asyncio.to_thread(binding.activate, dict_data, idf_data)

    async def _acquire(self, artifact_id: str, install_dir: Path, client: httpx.AsyncClient) -> None:
        locator = self._locator or ArtifactLocator(
            client, self.config.registry_url, self.config.scope, logger=self._logger
        )
        fetcher = self._fetcher or Fetcher(client, on_progress=self._on_progress, logger=self._logger)

        url = await locator.locate(artifact_id)

        self.state = ServiceState.DOWNLOADING
        report = await fetcher.fetch(url, install_dir)
        report.raise_for_status()

        self.state = ServiceState.EXTRACTING
        await self._extractor.extract(report.path)

        if not self.artifact_path(artifact_id).exists():
            raise ExtractionError(f"Archive from {url} did not contain package/{artifact_id}{NATIVE_SUFFIX}")

    @contextlib.asynccontextmanager
    async def _http_client(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self.config.http_timeout, follow_redirects=True) as client:
            yield client

    def _read_dictionary(self, path: Path | None) -> bytes | None:
        if path is None:
            return None
        full_path = path if path.is_absolute() else self.base_dir / path
        try:
            return full_path.read_bytes()
        except OSError as e:
            raise LoadError(f"Cannot read dictionary {full_path}: {e}") from e

    @property
    def segmenter(self) -> Segmenter:
        if self._segmenter is None:
            raise RuntimeError("Jieba service used before start() completed")
        return self._segmenter

    # Forwarding API

    def load_dict(self, data: bytes) -> None:
        self.segmenter.load_dict(data)

    def cut(self, text: str | bytes, hmm: bool | None = None) -> list[str]:
        return self.segmenter.cut(text, hmm)

    def cut_all(self, text: str | bytes) -> list[str]:
        return self.segmenter.cut_all(text)

    def cut_for_search(self, text: str | bytes, hmm: bool | None = None) -> list[str]:
        return self.segmenter.cut_for_search(text, hmm)

    def tag(self, text: str | bytes, hmm: bool | None = None) -> list[TaggedWord]:
        return self.segmenter.tag(text, hmm)

    def extract(self, text: str, top_n: int, allowed_pos: list[str] | None = None) -> list[Keyword]:
        return self.segmenter.extract_keywords(text, top_n, allowed_pos)

    def load_tfidf_dict(self, data: bytes) -> None:
        self.segmenter.load_tfidf_dict(data)
