"""Typed per-repository configuration.

Every field is optional. ``None`` means "not set in the repository's config
file"; the ``*_or_default`` accessors supply the global defaults. A
``RepoConfig()`` therefore is the all-defaults configuration used when a
repository has no config file or when it failed to parse.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta
from enum import Enum
from typing import Final, Optional

from pydantic import BaseModel, ConfigDict, PositiveInt

from .models import FilterResult, Rejection, Update
from .update_pattern import UpdatePattern, find_match, version_matches

DEFAULT_COMMIT_MESSAGE: Final[str] = "Update ${artifactName} to ${nextVersion}"
DEFAULT_FILE_EXTENSIONS: Final[tuple[str, ...]] = (
    ".scala",
    ".sbt",
    ".sc",
    ".yml",
    ".md",
    ".markdown",
    ".txt",
)


class PullRequestUpdateStrategy(str, Enum):
    """When an existing, outdated pull request gets rewritten."""

    ALWAYS = "always"
    ON_CONFLICTS = "on-conflicts"
    NEVER = "never"

    @classmethod
    def default(cls) -> "PullRequestUpdateStrategy":
        return cls.ON_CONFLICTS

    @classmethod
    def from_bool(cls, value: bool) -> "PullRequestUpdateStrategy":
        # Legacy boolean form of `updatePullRequests`
        return cls.ON_CONFLICTS if value else cls.NEVER

    @classmethod
    def from_string(cls, value: str) -> "PullRequestUpdateStrategy":
        """Map a config string to a strategy; unknown strings give the default."""
        normalized = value.strip().lower()
        for member in cls:
            if member.value == normalized:
                return member
        return cls.default()

    def should_update(self, has_conflicts: bool) -> bool:
        if self is PullRequestUpdateStrategy.ALWAYS:
            return True
        if self is PullRequestUpdateStrategy.ON_CONFLICTS:
            return has_conflicts
        return False


# Named presets accepted by `pullRequests.frequency`.
_FREQUENCY_PRESETS: Final[dict[str, Optional[timedelta]]] = {
    "@asap": None,
    "@daily": timedelta(days=1),
    "@weekly": timedelta(days=7),
    "@monthly": timedelta(days=30),
}

_DURATION: Final[re.Pattern[str]] = re.compile(r"^(\d+(?:\.\d+)?)\s*([a-z]+)$")

_DURATION_UNITS: Final[dict[str, str]] = {
    "d": "days",
    "day": "days",
    "days": "days",
    "h": "hours",
    "hour": "hours",
    "hours": "hours",
    "m": "minutes",
    "min": "minutes",
    "mins": "minutes",
    "minute": "minutes",
    "minutes": "minutes",
    "s": "seconds",
    "sec": "seconds",
    "secs": "seconds",
    "second": "seconds",
    "seconds": "seconds",
    "ms": "milliseconds",
    "milli": "milliseconds",
    "millis": "milliseconds",
    "millisecond": "milliseconds",
    "milliseconds": "milliseconds",
}


class PullRequestFrequency(BaseModel):
    """Minimum time between two pull requests; ``timespan=None`` is ASAP."""

    model_config = ConfigDict(frozen=True)

    timespan: Optional[timedelta] = None

    @classmethod
    def asap(cls) -> "PullRequestFrequency":
        return cls()

    @property
    def is_asap(self) -> bool:
        return self.timespan is None

    @classmethod
    def parse(cls, value: str) -> Optional["PullRequestFrequency"]:
        """Parse a preset (``@weekly``) or a duration (``12 hours``, ``3d``).

        Returns None when the value is neither.
        """
        s = value.strip().lower()
        if s in _FREQUENCY_PRESETS:
            return cls(timespan=_FREQUENCY_PRESETS[s])
        m = _DURATION.match(s)
        if m is None or m.group(2) not in _DURATION_UNITS:
            return None
        amount = float(m.group(1))
        return cls(timespan=timedelta(**{_DURATION_UNITS[m.group(2)]: amount}))

    def render(self) -> str:
        for name, span in _FREQUENCY_PRESETS.items():
            if span == self.timespan:
                return name
        assert self.timespan is not None
        return f"{int(self.timespan.total_seconds())} seconds"

    def waiting_time(self, last_created: datetime, now: datetime) -> Optional[timedelta]:
        """Time left before the next pull request may be created, or None."""
        if self.timespan is None:
            return None
        remaining = last_created + self.timespan - now
        return remaining if remaining > timedelta(0) else None


class PullRequestsConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    frequency: Optional[PullRequestFrequency] = None

    def frequency_or_default(self) -> PullRequestFrequency:
        return self.frequency or PullRequestFrequency.asap()


class CommitsConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: Optional[str] = None

    def message_or_default(self) -> str:
        return self.message if self.message is not None else DEFAULT_COMMIT_MESSAGE

    def render_message(self, update: Update) -> str:
        return (
            self.message_or_default()
            .replace("${artifactName}", update.name)
            .replace("${currentVersion}", update.current_version)
            .replace("${nextVersion}", update.next_version)
        )


class ScalafmtConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    run_after_upgrading: Optional[bool] = None

    def run_after_upgrading_or_default(self) -> bool:
        return bool(self.run_after_upgrading)


class UpdatesConfig(BaseModel):
    """Allow/pin/ignore policy plus update-related toggles."""

    model_config = ConfigDict(frozen=True)

    allow: tuple[UpdatePattern, ...] = ()
    pin: tuple[UpdatePattern, ...] = ()
    ignore: tuple[UpdatePattern, ...] = ()
    limit: Optional[PositiveInt] = None
    include_scala: Optional[bool] = None
    file_extensions: Optional[tuple[str, ...]] = None

    def include_scala_or_default(self) -> bool:
        return bool(self.include_scala)

    def file_extensions_or_default(self) -> tuple[str, ...]:
        if self.file_extensions is None:
            return DEFAULT_FILE_EXTENSIONS
        return self.file_extensions

    def keep(self, update: Update) -> FilterResult:
        """Apply allow, then pin, then ignore.

        Returns the update, possibly with ``newer_versions`` narrowed by pin
        or ignore rules, or a :class:`Rejection` naming the rule that
        dropped it.
        """

        result = self._is_allowed(update)
        if isinstance(result, Rejection):
            return result
        result = self._is_pinned(result)
        if isinstance(result, Rejection):
            return result
        return self._is_ignored(result)

    def _is_allowed(self, update: Update) -> FilterResult:
        # Allow rules are checked against the version currently in use.
        if not self.allow:
            return update
        for pattern in self.allow:
            if pattern.matches_update(update) and version_matches(
                pattern.version, update.current_version
            ):
                return update
        return Rejection(kind="not_allowed", update=update)

    def _is_pinned(self, update: Update) -> FilterResult:
        m = find_match(self.pin, update, include=True)
        if not m.by_artifact:
            return update
        if not m.filtered_versions:
            return Rejection(kind="version_pinned", update=update)
        return _narrowed(update, m.filtered_versions)

    def _is_ignored(self, update: Update) -> FilterResult:
        m = find_match(self.ignore, update, include=False)
        if not m.filtered_versions:
            return Rejection(kind="ignored", update=update)
        return _narrowed(update, m.filtered_versions)


def _narrowed(update: Update, versions: list[str]) -> Update:
    if tuple(versions) == update.newer_versions:
        return update
    return update.with_newer_versions(versions)


class RepoConfig(BaseModel):
    """Everything a repository can override in its config file."""

    model_config = ConfigDict(frozen=True)

    commits: CommitsConfig = CommitsConfig()
    pull_requests: PullRequestsConfig = PullRequestsConfig()
    scalafmt: ScalafmtConfig = ScalafmtConfig()
    updates: UpdatesConfig = UpdatesConfig()
    update_pull_requests: Optional[PullRequestUpdateStrategy] = None

    def update_pull_requests_or_default(self) -> PullRequestUpdateStrategy:
        return self.update_pull_requests or PullRequestUpdateStrategy.default()


__all__ = [
    "DEFAULT_COMMIT_MESSAGE",
    "DEFAULT_FILE_EXTENSIONS",
    "CommitsConfig",
    "PullRequestFrequency",
    "PullRequestUpdateStrategy",
    "PullRequestsConfig",
    "RepoConfig",
    "ScalafmtConfig",
    "UpdatesConfig",
]
