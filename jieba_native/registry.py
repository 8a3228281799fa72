"""Artifact locator: ask the package registry where the latest tarball lives."""

from __future__ import annotations

import logging

import httpx

from jieba_native.exceptions import RegistryError
from jieba_native.platforms import package_name

# Placeholders naming the npm layout the locator speaks. The @node-rs packages
# there are Node-API addons that the loader cannot import; deployments point
# these at a registry publishing CPython builds of the binding.
DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"
DEFAULT_SCOPE = "node-rs"


class ArtifactLocator:
    """Single-shot registry lookup.

    Issues exactly one GET for the package's ``latest`` metadata document and
    returns its ``dist.tarball`` URL. Retries are not this component's job.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        registry_url: str = DEFAULT_REGISTRY_URL,
        scope: str = DEFAULT_SCOPE,
        logger: logging.Logger | None = None,
    ) -> None:
        self._client = client
        self.registry_url = registry_url.rstrip("/")
        self.scope = scope
        self._logger = logger or logging.getLogger(__name__)

    def metadata_url(self, artifact_id: str) -> str:
        return f"{self.registry_url}/@{self.scope}/{package_name(artifact_id)}/latest"

    async def locate(self, artifact_id: str) -> str:
        """Return the download URL of the latest published artifact.

        Raises:
            RegistryError: On network failure, non-success status, malformed
                JSON, or a document without a tarball URL.
        """
        url = self.metadata_url(artifact_id)
        self._logger.debug(f"Querying registry: {url}")

        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            raise RegistryError(f"Registry request failed for {url}: {e}") from e

        if not response.is_success:
            raise RegistryError(
                f"Registry returned HTTP {response.status_code} for {url}",
                status_code=response.status_code,
            )

        try:
            document = response.json()
        except ValueError as e:
            raise RegistryError(f"Registry returned malformed JSON for {url}: {e}") from e

        dist = document.get("dist") if isinstance(document, dict) else None
        tarball = dist.get("tarball") if isinstance(dist, dict) else None
        if not isinstance(tarball, str) or not tarball:
            raise RegistryError(f"Registry metadata for {url} has no dist.tarball URL")

        self._logger.debug(f"Resolved {artifact_id} {document.get('version', '?')} -> {tarball}")
        return tarball
