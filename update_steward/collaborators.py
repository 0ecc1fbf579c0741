"""Interfaces of the external collaborators the decision core consumes.

Implementations are passed explicitly to the reconciliation functions in
:mod:`update_steward.update_alg`. All of them are async because real
implementations talk to caches, artifact repositories and VCS APIs.
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence

from pydantic import BaseModel, ConfigDict, Field

from .models import Dependency, PullRequestRecord, Repo, Update
from .repo_config import RepoConfig


class RepoCache(BaseModel):
    """Cached state of one repository at commit ``sha``."""

    model_config = ConfigDict(frozen=True)

    sha: str = Field(..., min_length=1)
    dependencies: tuple[Dependency, ...] = ()
    repo_config: Optional[RepoConfig] = None


class VersionResolver(Protocol):
    async def get_newer_versions(self, dependency: Dependency) -> list[str]:
        """Versions newer than ``dependency.version``, ascending; empty if none."""
        ...


class RepoCacheRepository(Protocol):
    async def get_dependencies(self, repos: Sequence[Repo]) -> list[Dependency]: ...

    async def find_cache(self, repo: Repo) -> Optional[RepoCache]: ...


class PullRequestRepository(Protocol):
    async def find_pull_request(
        self, repo: Repo, dependency: Dependency, next_version: str
    ) -> Optional[PullRequestRecord]: ...


class UpdateRepository(Protocol):
    async def delete_all(self) -> None: ...

    async def save_many(self, updates: Sequence[Update]) -> None: ...


class RepoConfigSource(Protocol):
    async def read_repo_config_text(self, repo: Repo) -> Optional[str]:
        """Raw text of the repository's config file, or None when absent."""
        ...


__all__ = [
    "PullRequestRepository",
    "RepoCache",
    "RepoCacheRepository",
    "RepoConfigSource",
    "UpdateRepository",
    "VersionResolver",
]
