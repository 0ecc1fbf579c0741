"""Update patterns used by the allow, pin and ignore lists.

Version matching is plain prefix/suffix string testing. There is no regex
and no numeric interpretation, so a pin such as ``prefix = "0.8."`` means
exactly "versions starting with 0.8.".
"""

from __future__ import annotations

from typing import Iterable, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import Update, strip_cross_suffix


class VersionMatch(BaseModel):
    """Prefix and/or suffix a version must carry. Neither set matches all."""

    model_config = ConfigDict(frozen=True)

    prefix: Optional[str] = None
    suffix: Optional[str] = None

    def matches(self, version: str) -> bool:
        if self.prefix is not None and not version.startswith(self.prefix):
            return False
        if self.suffix is not None and not version.endswith(self.suffix):
            return False
        return True


def version_matches(pattern: Optional[VersionMatch], candidate: str) -> bool:
    """Return True if ``candidate`` satisfies ``pattern``; no pattern matches all."""
    return pattern is None or pattern.matches(candidate)


class UpdatePattern(BaseModel):
    """A policy rule scoped to a group, optionally an artifact and a version shape."""

    model_config = ConfigDict(frozen=True)

    group_id: str = Field(..., min_length=1)
    artifact_id: Optional[str] = None
    version: Optional[VersionMatch] = None

    def matches_artifact(self, artifact_id: str) -> bool:
        # `refined` also covers `refined_2.13`, `refined_sjs1_2.13`, ...
        if self.artifact_id is None:
            return True
        return artifact_id == self.artifact_id or strip_cross_suffix(artifact_id) == self.artifact_id

    def matches_update(self, update: Update) -> bool:
        """Group/artifact scoping only; versions are not looked at."""
        if self.group_id != update.group_id:
            return False
        return any(self.matches_artifact(a) for a in update.artifact_ids)


class MatchResult(NamedTuple):
    by_artifact: list[UpdatePattern]
    filtered_versions: list[str]


def find_match(patterns: Iterable[UpdatePattern], update: Update, include: bool) -> MatchResult:
    """Scope ``patterns`` to ``update`` and split its newer versions.

    ``by_artifact`` holds the patterns whose group and artifact apply.
    ``filtered_versions`` holds the newer versions matched by at least one
    of those patterns when ``include`` is True, or matched by none of them
    when ``include`` is False.
    """

    by_artifact = [p for p in patterns if p.matches_update(update)]
    filtered = [
        v
        for v in update.newer_versions
        if any(version_matches(p.version, v) for p in by_artifact) == include
    ]
    return MatchResult(by_artifact, filtered)


__all__ = ["MatchResult", "UpdatePattern", "VersionMatch", "find_match", "version_matches"]
