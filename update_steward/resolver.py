"""Maven Central implementation of the ``VersionResolver`` collaborator."""

from __future__ import annotations

import logging
from typing import Optional

from .cache import Coordinates, SharedLookups, VersionListCache
from .central_api import MavenCentralHttpClient, build_params_for_versions, extract_versions, get_client
from .config import Settings
from .models import Dependency
from .versioning import newer_versions

_logger = logging.getLogger(__name__)


class MavenCentralVersionResolver:
    """Resolves newer versions of a dependency from Maven Central search.

    All published versions of ``group:artifact`` are fetched once per TTL
    and shared between concurrent lookups; the versions newer than the
    dependency's current one are returned ascending.
    """

    def __init__(
        self,
        *,
        client: MavenCentralHttpClient | None = None,
        settings: Settings | None = None,
    ) -> None:
        s = settings or Settings()
        self._client = client
        self._rows = s.MAVEN_CENTRAL_MAX_VERSIONS
        self._cache: Optional[VersionListCache] = (
            VersionListCache(ttl_seconds=s.CACHE_TTL_SECONDS_VERSIONS, capacity=s.CACHE_MAX_ENTRIES)
            if s.CACHE_ENABLED
            else None
        )
        self._lookups = SharedLookups()

    async def clear_cache(self) -> None:
        if self._cache is not None:
            await self._cache.clear()

    async def _fetch_all_versions(self, coords: Coordinates) -> list[str]:
        group_id, artifact_id = coords
        client = self._client or get_client()
        _logger.info(
            "querying maven central versions",
            extra={"op": "versions", "group_id": group_id, "artifact_id": artifact_id},
        )
        params = build_params_for_versions(group_id, artifact_id, self._rows)
        payload = await client.get_json(client.base_url, params=params)
        versions = extract_versions(payload)
        if self._cache is not None:
            await self._cache.store(coords, versions)
        return versions

    async def get_all_versions(self, group_id: str, artifact_id: str) -> list[str]:
        coords = (group_id, artifact_id)
        if self._cache is not None:
            cached = await self._cache.lookup(coords)
            if cached is not None:
                return cached
        return await self._lookups.join(coords, lambda: self._fetch_all_versions(coords))

    async def get_newer_versions(self, dependency: Dependency) -> list[str]:
        versions = await self.get_all_versions(dependency.group_id, dependency.artifact_id)
        return newer_versions(dependency.version, versions)


__all__ = ["MavenCentralVersionResolver"]
