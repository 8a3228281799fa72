"""Jieba segmentation backed by a prebuilt native binary.

The binary matching the running OS, architecture and C library is fetched
from the package registry on first start, unpacked into the install
directory and loaded once per process.
"""

__all__ = [
    "mount",
    "JiebaService",
    "JiebaConfig",
    "load_config",
    "ServiceState",
    "Keyword",
    "TaggedWord",
    "PlatformKey",
    "resolve",
    "is_musl_libc",
    "ErrorKind",
    "JiebaNativeError",
    "UnsupportedPlatformError",
    "RegistryError",
    "DownloadError",
    "ExtractionError",
    "ExtractionTimeoutError",
    "LoadError",
]

__version__ = "0.1.0"

import logging
from pathlib import Path
from typing import Any

from jieba_native.config import JiebaConfig
from jieba_native.exceptions import DownloadError
from jieba_native.exceptions import ErrorKind
from jieba_native.exceptions import ExtractionError
from jieba_native.exceptions import ExtractionTimeoutError
from jieba_native.exceptions import JiebaNativeError
from jieba_native.exceptions import LoadError
from jieba_native.exceptions import RegistryError
from jieba_native.exceptions import UnsupportedPlatformError
from jieba_native.libc import is_musl_libc
from jieba_native.models import Keyword
from jieba_native.models import TaggedWord
from jieba_native.platforms import PlatformKey
from jieba_native.platforms import resolve
from jieba_native.service import JiebaService
from jieba_native.service import ServiceState

logger = logging.getLogger(__name__)


async def mount(coordinator: Any, config: dict[str, Any] | None = None):
    """
    Start the jieba service and mount it on a plugin host.

    Args:
        coordinator: Host coordinator exposing ``mount(point, obj, name=...)``
            and optionally ``base_dir``
        config: Service configuration (see :class:`JiebaConfig`)

    Returns:
        None; the native binding lives until the process exits
    """
    jieba_config = JiebaConfig.model_validate(config or {})
    base_dir = Path(getattr(coordinator, "base_dir", None) or Path.cwd())

    service = JiebaService(jieba_config, base_dir)
    await service.start()
    await coordinator.mount("services", service, name=JiebaService.name)
    logger.info("Mounted JiebaService")
    return None
