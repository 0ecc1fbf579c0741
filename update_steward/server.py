"""MCP STDIO server exposing the decision core as tools.

The ``*_core`` functions hold the logic and are transport-neutral; the
``@_server.tool()`` wrappers only convert results to plain dicts.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastmcp import FastMCP

from .config import Settings
from .global_filter import is_ignored_globally
from .logging_config import configure_logging
from .models import Dependency, Update
from .repo_config_parser import (
    RepoConfigParseError,
    config_to_ignore_further_updates,
    parse_repo_config,
    read_repo_config_with_default,
)
from .resolver import MavenCentralVersionResolver
from .update_alg import discover_update, resolve_update_state
from .update_state import update_of

_logger = logging.getLogger(__name__)

_settings = Settings()
configure_logging(_settings.LOG_LEVEL, json_logs=_settings.LOG_JSON)

_resolver: MavenCentralVersionResolver | None = None


def get_resolver() -> MavenCentralVersionResolver:
    global _resolver
    if _resolver is None:
        _resolver = MavenCentralVersionResolver()
    return _resolver


def validate_repo_config_core(content: str) -> dict[str, Any]:
    """Parse config text strictly; report the error instead of defaulting."""
    try:
        config = parse_repo_config(content)
    except RepoConfigParseError as e:
        return {"valid": False, "error": str(e), "config": None}
    return {"valid": True, "error": None, "config": config.model_dump(mode="json")}


def ignore_snippet_core(
    *, group_id: str, artifact_ids: list[str], current_version: str, next_version: str
) -> str:
    update = Update(
        group_id=group_id,
        artifact_ids=tuple(artifact_ids),
        current_version=current_version,
        newer_versions=(next_version,),
    )
    return config_to_ignore_further_updates(update)


async def check_dependency_core(
    *,
    group_id: str,
    artifact_id: str,
    version: str,
    repo_config: Optional[str] = None,
    resolver: MavenCentralVersionResolver | None = None,
) -> dict[str, Any]:
    """Discover and classify the update of one dependency.

    Pull request history is not consulted, so the outcome is one of
    ``dependency_up_to_date``, ``update_rejected_by_config`` or
    ``dependency_outdated``. A malformed ``repo_config`` is logged and
    replaced by the defaults, as during a regular pass.
    """

    dependency = Dependency(group_id=group_id, artifact_id=artifact_id, version=version)
    config = read_repo_config_with_default(repo_config)

    if is_ignored_globally(dependency):
        update = None
    else:
        update = await discover_update(dependency, resolver or get_resolver())

    state = resolve_update_state(dependency, update, config, None, "")
    kept = update_of(state)
    return {
        "kind": state.kind,
        "state": str(state),
        "update": kept.model_dump(mode="json") if kept is not None else None,
        "commit_message": config.commits.render_message(kept) if kept is not None else None,
        "ignore_snippet": config_to_ignore_further_updates(kept) if kept is not None else None,
    }


_server = FastMCP("update-steward")


@_server.tool()
def validate_repo_config(content: str) -> dict:
    """Validate the text of a .scala-steward.conf file."""
    return validate_repo_config_core(content)


@_server.tool()
def ignore_snippet(
    group_id: str, artifact_ids: list[str], current_version: str, next_version: str
) -> str:
    """Return a config snippet that ignores further updates like this one."""
    return ignore_snippet_core(
        group_id=group_id,
        artifact_ids=artifact_ids,
        current_version=current_version,
        next_version=next_version,
    )


@_server.tool()
async def check_dependency(
    group_id: str,
    artifact_id: str,
    version: str,
    repo_config: Optional[str] = None,
) -> dict:
    """Check Maven Central for an update of one dependency under a repo config."""
    return await check_dependency_core(
        group_id=group_id,
        artifact_id=artifact_id,
        version=version,
        repo_config=repo_config,
    )


def run() -> None:  # pragma: no cover
    _server.run()


__all__ = [
    "check_dependency_core",
    "get_resolver",
    "ignore_snippet_core",
    "run",
    "validate_repo_config_core",
]
