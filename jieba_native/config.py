"""Configuration for the jieba service.

Philosophy: one small pydantic model, optionally read from YAML.
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel
from pydantic import Field

from jieba_native.extractor import DEFAULT_EXTRACTION_TIMEOUT
from jieba_native.registry import DEFAULT_REGISTRY_URL
from jieba_native.registry import DEFAULT_SCOPE

logger = logging.getLogger(__name__)


class JiebaConfig(BaseModel):
    """Service configuration consumed from the host."""

    install_dir: str = Field(
        default="node-rs/jieba",
        description="Directory for the native artifact, relative to the host base directory",
    )
    registry_url: str = Field(
        default=DEFAULT_REGISTRY_URL, description="Package registry base URL; must publish CPython builds of the binding"
    )
    scope: str = Field(default=DEFAULT_SCOPE, description="Registry scope the artifacts are published under")
    dict_path: Path | None = Field(default=None, description="Custom segmentation dictionary")
    idf_path: Path | None = Field(default=None, description="Custom IDF dictionary for keyword extraction")
    http_timeout: float = Field(default=60.0, gt=0, description="Per-request HTTP timeout in seconds")
    extraction_timeout: float | None = Field(
        default=DEFAULT_EXTRACTION_TIMEOUT,
        gt=0,
        description="Upper bound in seconds for unpacking the archive; null waits forever",
    )

    def resolve_install_dir(self, base_dir: Path) -> Path:
        """Absolute install directory for a host rooted at ``base_dir``."""
        return (base_dir / self.install_dir).resolve()


def load_config(path: Path | None) -> JiebaConfig:
    """Read a YAML config file; a missing file yields the defaults.

    The file may either hold the fields at top level or under a ``jieba`` key.
    """
    if path is None or not path.exists():
        return JiebaConfig()

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if isinstance(data, dict) and isinstance(data.get("jieba"), dict):
        data = data["jieba"]
    logger.debug(f"Loaded jieba config from {path}")
    return JiebaConfig.model_validate(data)
