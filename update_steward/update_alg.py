"""Update discovery and per-repository reconciliation.

Flow of one pass:

1. :func:`check_for_updates` resolves newer versions for every cached
   dependency of the given repositories, after the global ignore list,
   and keeps the updates surviving the global filter.
2. :func:`find_all_update_states` crosses those updates with one
   repository's config and pull request history into one
   :data:`UpdateState` per dependency.
3. :func:`needs_attention` reports whether any state asks for action.

The decision itself (:func:`resolve_update_state`) is a pure function;
the async wrappers only fetch its inputs from the collaborators.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional, Sequence

from .collaborators import (
    PullRequestRepository,
    RepoCache,
    RepoCacheRepository,
    UpdateRepository,
    VersionResolver,
)
from .global_filter import global_filter_one, is_ignored_globally
from .models import Dependency, PullRequestRecord, PullRequestState, Rejection, Repo, Update
from .relocations import find_update_under_new_group
from .repo_config import RepoConfig
from .update_state import (
    DependencyOutdated,
    DependencyUpToDate,
    PullRequestClosed,
    PullRequestOutdated,
    PullRequestUpToDate,
    UpdateRejectedByConfig,
    UpdateState,
    is_outdated,
    update_of,
)

_logger = logging.getLogger(__name__)


def indent_lines(lines: Iterable[str]) -> str:
    return "\n".join(f"  {line}" for line in lines)


def show_updates(updates: Sequence[Update]) -> str:
    if not updates:
        return "Found 0 updates"
    header = f"Found {len(updates)} update{'s' if len(updates) != 1 else ''}:"
    return header + "\n" + indent_lines(u.show() for u in updates)


def format_update_states(states: Iterable[UpdateState]) -> str:
    """One line per state, sorted, for deterministic logs."""
    return indent_lines(sorted(str(s) for s in states))


def is_update_for(update: Update, dependency: Dependency) -> bool:
    return (
        update.group_id == dependency.group_id
        and dependency.artifact_id in update.artifact_ids
        and update.current_version == dependency.version
    )


async def discover_update(
    dependency: Dependency, resolver: VersionResolver
) -> Optional[Update]:
    newer = await resolver.get_newer_versions(dependency)
    if newer:
        update = dependency.to_update(newer)
    else:
        update = find_update_under_new_group(dependency)
        if update is None:
            return None
    result = global_filter_one(update)
    if isinstance(result, Rejection):
        _logger.debug(
            "update dropped by global filter",
            extra={"update": update.show(), "reason": result.message},
        )
        return None
    return result


async def check_for_updates(
    repos: Sequence[Repo],
    *,
    repo_caches: RepoCacheRepository,
    resolver: VersionResolver,
    update_repository: UpdateRepository,
) -> list[Update]:
    """Discover the updates available for all dependencies of ``repos``.

    Previously stored updates are deleted first and the result is stored
    afterwards. Order follows the dependency order of the cache.
    """

    await update_repository.delete_all()
    dependencies = await repo_caches.get_dependencies(repos)
    candidates = [d for d in dependencies if not is_ignored_globally(d)]

    discovered = await asyncio.gather(*(discover_update(d, resolver) for d in candidates))
    updates = [u for u in discovered if u is not None]

    _logger.info(show_updates(updates))
    await update_repository.save_many(updates)
    return updates


def resolve_update_state(
    dependency: Dependency,
    update: Optional[Update],
    repo_config: RepoConfig,
    pull_request: Optional[PullRequestRecord],
    current_sha: str,
) -> UpdateState:
    """Combine discovery, policy and pull request history into one verdict.

    ``update`` is the discovered update matching ``dependency`` (if any)
    and ``pull_request`` the record found for its next version.
    """

    if update is None:
        return DependencyUpToDate(dependency=dependency)

    kept = repo_config.updates.keep(update)
    if isinstance(kept, Rejection):
        return UpdateRejectedByConfig(dependency=dependency, reason=kept)

    if pull_request is None:
        return DependencyOutdated(dependency=dependency, update=kept)
    # Closed wins over staleness: closed pull requests are never reopened.
    if pull_request.state is PullRequestState.CLOSED:
        return PullRequestClosed(dependency=dependency, update=kept, pr_ref=pull_request.ref)
    if pull_request.base_sha == current_sha:
        return PullRequestUpToDate(dependency=dependency, update=kept, pr_ref=pull_request.ref)
    return PullRequestOutdated(dependency=dependency, update=kept, pr_ref=pull_request.ref)


async def find_update_state(
    repo: Repo,
    repo_cache: RepoCache,
    dependency: Dependency,
    updates: Sequence[Update],
    *,
    pull_requests: PullRequestRepository,
) -> UpdateState:
    update = next((u for u in updates if is_update_for(u, dependency)), None)
    repo_config = repo_cache.repo_config or RepoConfig()

    pull_request: Optional[PullRequestRecord] = None
    if update is not None:
        kept = repo_config.updates.keep(update)
        if not isinstance(kept, Rejection):
            pull_request = await pull_requests.find_pull_request(
                repo, dependency, kept.next_version
            )
    return resolve_update_state(dependency, update, repo_config, pull_request, repo_cache.sha)


async def find_all_update_states(
    repo: Repo,
    updates: Sequence[Update],
    *,
    repo_caches: RepoCacheRepository,
    pull_requests: PullRequestRepository,
) -> list[UpdateState]:
    """One state per cached dependency of ``repo``; empty if it has no cache."""
    repo_cache = await repo_caches.find_cache(repo)
    if repo_cache is None:
        return []
    return [
        await find_update_state(repo, repo_cache, d, updates, pull_requests=pull_requests)
        for d in repo_cache.dependencies
    ]


async def needs_attention(
    repo: Repo,
    updates: Sequence[Update],
    *,
    repo_caches: RepoCacheRepository,
    pull_requests: PullRequestRepository,
) -> bool:
    states = await find_all_update_states(
        repo, updates, repo_caches=repo_caches, pull_requests=pull_requests
    )
    outdated = [s for s in states if is_outdated(s)]
    if outdated:
        _logger.info("Update states for %s:\n%s", repo.show(), format_update_states(outdated))
    return bool(outdated)


async def filter_by_applicable_updates(
    repos: Sequence[Repo],
    updates: Sequence[Update],
    *,
    repo_caches: RepoCacheRepository,
    pull_requests: PullRequestRepository,
) -> list[Repo]:
    """The repositories that need attention, in input order."""
    selected: list[Repo] = []
    for repo in repos:
        if await needs_attention(
            repo, updates, repo_caches=repo_caches, pull_requests=pull_requests
        ):
            selected.append(repo)
    return selected


def select_actionable(states: Iterable[UpdateState], limit: Optional[int] = None) -> list[Update]:
    """Updates of the outdated states, at most ``limit`` of them."""
    actionable: list[Update] = []
    for state in states:
        update = update_of(state)
        if update is not None and is_outdated(state):
            actionable.append(update)
    return actionable if limit is None else actionable[:limit]


__all__ = [
    "check_for_updates",
    "discover_update",
    "filter_by_applicable_updates",
    "find_all_update_states",
    "find_update_state",
    "format_update_states",
    "is_update_for",
    "needs_attention",
    "resolve_update_state",
    "select_actionable",
    "show_updates",
]
