"""Repository-independent filtering applied during update discovery.

Two hard-coded, non-configurable lists live here:

- ``GLOBALLY_IGNORED`` removes whole dependencies before any version is
  resolved for them.
- ``BAD_VERSIONS`` drops known-broken publications from the candidate
  versions of an update, using the same pattern matching as the
  per-repository ``updates.ignore`` list.
"""

from __future__ import annotations

from typing import Final

from .models import Dependency, FilterResult, Rejection, Update, strip_cross_suffix
from .update_pattern import UpdatePattern, VersionMatch, find_match
from .versioning import is_snapshot

GLOBALLY_IGNORED: Final[frozenset[tuple[str, str]]] = frozenset(
    {
        ("org.scala-lang", "scala-compiler"),
        ("org.scala-lang", "scala-library"),
        ("org.scala-lang", "scala-reflect"),
        ("org.scala-lang", "scalap"),
        ("org.typelevel", "scala-library"),
    }
)

BAD_VERSIONS: Final[tuple[UpdatePattern, ...]] = (
    # Timestamped uploads that sort above every real release
    UpdatePattern(
        group_id="commons-collections",
        artifact_id="commons-collections",
        version=VersionMatch(prefix="200"),
    ),
    UpdatePattern(group_id="commons-io", artifact_id="commons-io", version=VersionMatch(prefix="200")),
    UpdatePattern(group_id="io.monix", version=VersionMatch(prefix="3.0.0-fbcb270")),
    UpdatePattern(
        group_id="net.sourceforge.plantuml",
        artifact_id="plantuml",
        version=VersionMatch(prefix="6055"),
    ),
    UpdatePattern(
        group_id="net.sourceforge.plantuml",
        artifact_id="plantuml",
        version=VersionMatch(prefix="8059"),
    ),
    UpdatePattern(
        group_id="com.nequissimus",
        artifact_id="sort-imports",
        version=VersionMatch(prefix="36845576"),
    ),
)


def is_ignored_globally(dependency: Dependency) -> bool:
    key = (dependency.group_id, strip_cross_suffix(dependency.artifact_id))
    return key in GLOBALLY_IGNORED


def global_filter_one(update: Update) -> FilterResult:
    """Drop snapshot candidates for non-snapshot versions and known-bad versions."""
    candidates = update.newer_versions
    if not is_snapshot(update.current_version):
        candidates = tuple(v for v in candidates if not is_snapshot(v))
    if not candidates:
        return Rejection(kind="bad_versions", update=update)

    narrowed = update if candidates == update.newer_versions else update.with_newer_versions(candidates)
    m = find_match(BAD_VERSIONS, narrowed, include=False)
    if not m.filtered_versions:
        return Rejection(kind="bad_versions", update=update)
    if len(m.filtered_versions) == len(narrowed.newer_versions):
        return narrowed
    return narrowed.with_newer_versions(m.filtered_versions)


__all__ = ["BAD_VERSIONS", "GLOBALLY_IGNORED", "global_filter_one", "is_ignored_globally"]
