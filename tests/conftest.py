from __future__ import annotations

from collections.abc import AsyncIterator, Iterator
from typing import Optional, Sequence

import pytest
import respx

from update_steward import server as server_module
from update_steward.collaborators import RepoCache
from update_steward.models import Dependency, PullRequestRecord, Repo, Update


class InMemoryRepoCacheRepository:
    def __init__(self, caches: Optional[dict[Repo, RepoCache]] = None) -> None:
        self.caches: dict[Repo, RepoCache] = dict(caches or {})

    async def get_dependencies(self, repos: Sequence[Repo]) -> list[Dependency]:
        seen: list[Dependency] = []
        for repo in repos:
            cache = self.caches.get(repo)
            if cache is None:
                continue
            for dep in cache.dependencies:
                if dep not in seen:
                    seen.append(dep)
        return seen

    async def find_cache(self, repo: Repo) -> Optional[RepoCache]:
        return self.caches.get(repo)


class StaticVersionResolver:
    """Answers from a ``"group:artifact:version" -> newer versions`` table."""

    def __init__(self, table: Optional[dict[str, list[str]]] = None) -> None:
        self.table = dict(table or {})
        self.calls: list[Dependency] = []

    async def get_newer_versions(self, dependency: Dependency) -> list[str]:
        self.calls.append(dependency)
        return list(self.table.get(str(dependency), []))


class InMemoryPullRequestRepository:
    def __init__(self) -> None:
        self.records: dict[tuple[Repo, str, str, str], PullRequestRecord] = {}
        self.lookups: list[tuple[Repo, Dependency, str]] = []

    def add(self, repo: Repo, dependency: Dependency, next_version: str, record: PullRequestRecord) -> None:
        key = (repo, dependency.group_id, dependency.artifact_id, next_version)
        self.records[key] = record

    async def find_pull_request(
        self, repo: Repo, dependency: Dependency, next_version: str
    ) -> Optional[PullRequestRecord]:
        self.lookups.append((repo, dependency, next_version))
        return self.records.get((repo, dependency.group_id, dependency.artifact_id, next_version))


class RecordingUpdateRepository:
    def __init__(self) -> None:
        self.saved: list[Update] = []
        self.events: list[str] = []

    async def delete_all(self) -> None:
        self.events.append("delete_all")
        self.saved = []

    async def save_many(self, updates: Sequence[Update]) -> None:
        self.events.append("save_many")
        self.saved.extend(updates)


class StaticRepoConfigSource:
    def __init__(self, texts: Optional[dict[Repo, str]] = None) -> None:
        self.texts = dict(texts or {})

    async def read_repo_config_text(self, repo: Repo) -> Optional[str]:
        return self.texts.get(repo)


@pytest.fixture(autouse=True)
async def _reset_resolver_cache() -> AsyncIterator[None]:
    if server_module._resolver is not None:
        await server_module._resolver.clear_cache()
    yield


@pytest.fixture
def repo() -> Repo:
    return Repo(owner="fthomas", repo="scala-steward")


@pytest.fixture
def repo_caches() -> InMemoryRepoCacheRepository:
    return InMemoryRepoCacheRepository()


@pytest.fixture
def pull_requests() -> InMemoryPullRequestRepository:
    return InMemoryPullRequestRepository()


@pytest.fixture
def update_repository() -> RecordingUpdateRepository:
    return RecordingUpdateRepository()


@pytest.fixture
def respx_router() -> Iterator[respx.Router]:
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture
def respx_versions_mock(respx_router: respx.Router):
    """Route on the Maven Central search URL; tests attach responses with `.mock(...)`."""
    from update_steward.config import Settings

    return respx_router.get(Settings().MAVEN_CENTRAL_BASE_URL)
