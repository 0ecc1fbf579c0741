"""Parsing of ``.scala-steward.conf`` repository config files.

Decoding runs in two stages:

1. :func:`parse_tree` turns the relaxed HOCON text (dotted keys, unquoted
   strings, optional commas) into a plain nested dict via pyhocon.
2. :func:`decode_repo_config` walks that tree and applies one coercion
   function per field. Absent keys keep their ``None``/empty defaults;
   unknown keys are ignored.

Every failure in either stage surfaces as a single
:class:`RepoConfigParseError`. :func:`read_repo_config_with_default` logs
it and degrades to ``RepoConfig()``.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, Final, Optional

from pyhocon import ConfigFactory, ConfigTree

from .collaborators import RepoConfigSource
from .models import Repo, Update
from .repo_config import (
    CommitsConfig,
    PullRequestFrequency,
    PullRequestsConfig,
    PullRequestUpdateStrategy,
    RepoConfig,
    ScalafmtConfig,
    UpdatesConfig,
)
from .update_pattern import UpdatePattern, VersionMatch

_logger = logging.getLogger(__name__)

REPO_CONFIG_FILE_NAME: Final[str] = ".scala-steward.conf"

_TRUE_STRINGS: Final[frozenset[str]] = frozenset({"true", "yes", "on"})
_FALSE_STRINGS: Final[frozenset[str]] = frozenset({"false", "no", "off"})


class RepoConfigParseError(ValueError):
    """The config text is not valid HOCON or a value has the wrong shape."""


# -----------------------------
# Stage 1: text to tree
# -----------------------------


def parse_tree(content: str) -> dict[str, Any]:
    try:
        tree = ConfigFactory.parse_string(content)
        if not isinstance(tree, ConfigTree):
            raise RepoConfigParseError("top-level value must be an object")
        return dict(tree.as_plain_ordered_dict())
    except RepoConfigParseError:
        raise
    except Exception as e:
        raise RepoConfigParseError(f"{type(e).__name__}: {e}") from e


# -----------------------------
# Stage 2: per-field coercion
# -----------------------------


def _type_error(path: str, expected: str, value: Any) -> RepoConfigParseError:
    return RepoConfigParseError(
        f"{path}: expected {expected}, got {type(value).__name__} ({value!r})"
    )


def _section(tree: Mapping[str, Any], key: str, path: str) -> Mapping[str, Any]:
    value = tree.get(key)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise _type_error(path, "an object", value)
    return value


def coerce_string(value: Any, path: str) -> str:
    # Integers are accepted where a string is expected, e.g. `version = 2`.
    # Floats are not: `2.10` would come back as "2.1".
    if isinstance(value, (bool, float)):
        raise _type_error(path, "a string (quote decimal numbers)", value)
    if isinstance(value, (str, int)):
        return str(value)
    raise _type_error(path, "a string", value)


def coerce_bool(value: Any, path: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        s = value.strip().lower()
        if s in _TRUE_STRINGS:
            return True
        if s in _FALSE_STRINGS:
            return False
    raise _type_error(path, "a boolean", value)


def coerce_positive_int(value: Any, path: str) -> int:
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, int) and not isinstance(value, bool) and value > 0:
        return value
    raise _type_error(path, "a positive integer", value)


def coerce_version_match(value: Any, path: str) -> VersionMatch:
    """A bare string is a prefix; an object may carry ``prefix`` and ``suffix``."""
    if isinstance(value, Mapping):
        prefix = value.get("prefix")
        suffix = value.get("suffix")
        return VersionMatch(
            prefix=None if prefix is None else coerce_string(prefix, f"{path}.prefix"),
            suffix=None if suffix is None else coerce_string(suffix, f"{path}.suffix"),
        )
    return VersionMatch(prefix=coerce_string(value, path))


def coerce_update_pattern(value: Any, path: str) -> UpdatePattern:
    """An object ``{groupId, artifactId?, version?}`` or a ``group[:artifact[:version]]`` string."""
    if isinstance(value, Mapping):
        group_id = value.get("groupId")
        if group_id is None:
            raise RepoConfigParseError(f"{path}.groupId: missing required key")
        group = coerce_string(group_id, f"{path}.groupId").strip()
        if not group:
            raise RepoConfigParseError(f"{path}.groupId: must not be empty")
        artifact_id = value.get("artifactId")
        version = value.get("version")
        return UpdatePattern(
            group_id=group,
            artifact_id=None if artifact_id is None else coerce_string(artifact_id, f"{path}.artifactId"),
            version=None if version is None else coerce_version_match(version, f"{path}.version"),
        )
    if isinstance(value, str):
        parts = [p.strip() for p in value.split(":", 2)]
        if not parts[0] or any(not p for p in parts[1:]):
            raise RepoConfigParseError(f"{path}: malformed pattern {value!r}")
        return UpdatePattern(
            group_id=parts[0],
            artifact_id=parts[1] if len(parts) > 1 else None,
            version=VersionMatch(prefix=parts[2]) if len(parts) > 2 else None,
        )
    raise _type_error(path, "an object or a string", value)


def coerce_pattern_list(value: Any, path: str) -> tuple[UpdatePattern, ...]:
    if not isinstance(value, list):
        raise _type_error(path, "a list", value)
    return tuple(coerce_update_pattern(v, f"{path}[{i}]") for i, v in enumerate(value))


def coerce_file_extensions(value: Any, path: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise _type_error(path, "a list", value)
    extensions = []
    for i, v in enumerate(value):
        ext = coerce_string(v, f"{path}[{i}]")
        if not ext.startswith("."):
            raise RepoConfigParseError(f"{path}[{i}]: {ext!r} must start with '.'")
        extensions.append(ext)
    return tuple(extensions)


def coerce_update_strategy(value: Any, path: str) -> PullRequestUpdateStrategy:
    if isinstance(value, bool):
        return PullRequestUpdateStrategy.from_bool(value)
    if isinstance(value, str):
        return PullRequestUpdateStrategy.from_string(value)
    raise _type_error(path, "a boolean or a string", value)


def coerce_frequency(value: Any, path: str) -> PullRequestFrequency:
    """Presets and durations parse; anything else falls back to ASAP.

    An unquoted duration such as `7 days` arrives from pyhocon as a timedelta.
    """
    if isinstance(value, timedelta):
        return PullRequestFrequency(timespan=value)
    if not isinstance(value, str):
        raise _type_error(path, "a string", value)
    parsed = PullRequestFrequency.parse(value)
    if parsed is None:
        _logger.debug("unrecognized pull request frequency", extra={"value": value})
        return PullRequestFrequency.asap()
    return parsed


def _decode_updates(tree: Mapping[str, Any]) -> UpdatesConfig:
    s = _section(tree, "updates", "updates")
    fields: dict[str, Any] = {}
    for key in ("allow", "pin", "ignore"):
        if s.get(key) is not None:
            fields[key] = coerce_pattern_list(s[key], f"updates.{key}")
    if s.get("limit") is not None:
        fields["limit"] = coerce_positive_int(s["limit"], "updates.limit")
    if s.get("includeScala") is not None:
        fields["include_scala"] = coerce_bool(s["includeScala"], "updates.includeScala")
    if s.get("fileExtensions") is not None:
        fields["file_extensions"] = coerce_file_extensions(
            s["fileExtensions"], "updates.fileExtensions"
        )
    return UpdatesConfig(**fields)


def decode_repo_config(tree: Mapping[str, Any]) -> RepoConfig:
    """Build a :class:`RepoConfig` from an already parsed tree."""

    pull_requests = _section(tree, "pullRequests", "pullRequests")
    commits = _section(tree, "commits", "commits")
    scalafmt = _section(tree, "scalafmt", "scalafmt")

    frequency = pull_requests.get("frequency")
    message = commits.get("message")
    run_after = scalafmt.get("runAfterUpgrading")
    strategy = tree.get("updatePullRequests")

    return RepoConfig(
        updates=_decode_updates(tree),
        pull_requests=PullRequestsConfig(
            frequency=None
            if frequency is None
            else coerce_frequency(frequency, "pullRequests.frequency")
        ),
        commits=CommitsConfig(
            message=None if message is None else coerce_string(message, "commits.message")
        ),
        scalafmt=ScalafmtConfig(
            run_after_upgrading=None
            if run_after is None
            else coerce_bool(run_after, "scalafmt.runAfterUpgrading")
        ),
        update_pull_requests=None
        if strategy is None
        else coerce_update_strategy(strategy, "updatePullRequests"),
    )


def parse_repo_config(content: str) -> RepoConfig:
    """Parse config text. Raises :class:`RepoConfigParseError` on malformed input."""
    return decode_repo_config(parse_tree(content))


def read_repo_config_with_default(content: Optional[str]) -> RepoConfig:
    """Parse config text if present; absence or failure yields ``RepoConfig()``."""
    if content is None:
        return RepoConfig()
    try:
        return parse_repo_config(content)
    except RepoConfigParseError as e:
        _logger.warning("Failed to parse %s: %s", REPO_CONFIG_FILE_NAME, e)
        return RepoConfig()


async def load_repo_config(repo: Repo, source: RepoConfigSource) -> RepoConfig:
    content = await source.read_repo_config_text(repo)
    return read_repo_config_with_default(content)


def config_to_ignore_further_updates(update: Update) -> str:
    """Config snippet that ignores future updates like ``update``.

    Group updates are ignored for the whole group; single-artifact updates
    for that artifact only.
    """
    group = json.dumps(update.group_id)
    if update.is_group:
        return f"updates.ignore = [ {{ groupId = {group} }} ]"
    artifact = json.dumps(update.artifact_id)
    return f"updates.ignore = [ {{ groupId = {group}, artifactId = {artifact} }} ]"


__all__ = [
    "REPO_CONFIG_FILE_NAME",
    "RepoConfigParseError",
    "coerce_bool",
    "coerce_file_extensions",
    "coerce_frequency",
    "coerce_pattern_list",
    "coerce_positive_int",
    "coerce_update_pattern",
    "coerce_update_strategy",
    "coerce_version_match",
    "config_to_ignore_further_updates",
    "decode_repo_config",
    "load_repo_config",
    "parse_repo_config",
    "parse_tree",
    "read_repo_config_with_default",
]
