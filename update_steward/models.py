"""Pydantic domain models shared by the policy engine and the state machine.

All models are frozen: they are produced by external collaborators (the
repository cache, the version resolver, the pull request history) and
flow through the decision core without being mutated.
"""

from __future__ import annotations

import os
import re
from enum import Enum
from typing import Final, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Upper bound for coordinate parts; real Maven coordinates stay well under it.
_COORD_PART_MAX_LEN = 200

# Cross-build suffixes appended to artifact ids, e.g. `_2.13`, `_3`,
# `_sjs1_2.13`, `_native0.4_3`.
_CROSS_SUFFIX: Final[re.Pattern[str]] = re.compile(
    r"_(?:(?:sjs|native)\d+(?:\.\d+)*_)?\d+(?:\.\d+)*$"
)


def strip_cross_suffix(artifact_id: str) -> str:
    """Return ``artifact_id`` without a trailing cross-build suffix."""
    return _CROSS_SUFFIX.sub("", artifact_id)


def _strip_non_empty(v: str) -> str:
    v_stripped = v.strip()
    if not v_stripped:
        raise ValueError("must not be empty")
    return v_stripped


class Repo(BaseModel):
    """A repository hosted on a VCS, identified as ``owner/repo``."""

    model_config = ConfigDict(frozen=True)

    owner: str = Field(..., min_length=1)
    repo: str = Field(..., min_length=1)

    def show(self) -> str:
        return f"{self.owner}/{self.repo}"

    def __str__(self) -> str:
        return self.show()


class Dependency(BaseModel):
    """A library in use at a specific version.

    ``cross_artifact_ids`` lists further artifact ids published for the same
    version (e.g. the per-binary-version names of a cross-built library).
    """

    model_config = ConfigDict(frozen=True)

    group_id: str = Field(..., min_length=1, max_length=_COORD_PART_MAX_LEN)
    artifact_id: str = Field(..., min_length=1, max_length=_COORD_PART_MAX_LEN)
    version: str = Field(..., min_length=1)
    cross_artifact_ids: tuple[str, ...] = ()

    @field_validator("group_id", "artifact_id", "version")
    @classmethod
    def _strip_and_validate(cls, v: str) -> str:
        return _strip_non_empty(v)

    def to_update(self, newer_versions: list[str] | tuple[str, ...]) -> "Update":
        others = [a for a in self.cross_artifact_ids if a != self.artifact_id]
        return Update(
            group_id=self.group_id,
            artifact_ids=(self.artifact_id, *dict.fromkeys(others)),
            current_version=self.version,
            newer_versions=tuple(newer_versions),
        )

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


class Update(BaseModel):
    """A proposed version bump for one artifact or a group of artifacts.

    A group update covers several artifacts of the same group that share
    identical current and newer versions. ``newer_versions`` is ascending
    and never empty; ``newer_group_id`` is set when the artifact has been
    relocated to another group.
    """

    model_config = ConfigDict(frozen=True)

    group_id: str = Field(..., min_length=1, max_length=_COORD_PART_MAX_LEN)
    artifact_ids: tuple[str, ...] = Field(..., min_length=1)
    current_version: str = Field(..., min_length=1)
    newer_versions: tuple[str, ...] = Field(..., min_length=1)
    newer_group_id: Optional[str] = None

    @field_validator("group_id", "current_version")
    @classmethod
    def _strip_and_validate(cls, v: str) -> str:
        return _strip_non_empty(v)

    @property
    def is_group(self) -> bool:
        return len(self.artifact_ids) > 1

    @property
    def artifact_id(self) -> str:
        return self.artifact_ids[0]

    @property
    def next_version(self) -> str:
        return self.newer_versions[-1]

    @property
    def name(self) -> str:
        """Human readable artifact name used in commit messages."""
        if not self.is_group:
            return strip_cross_suffix(self.artifact_id)
        prefix = os.path.commonprefix([strip_cross_suffix(a) for a in self.artifact_ids])
        prefix = prefix.rstrip("-_.")
        return prefix or self.group_id.rsplit(".", 1)[-1]

    def with_newer_versions(self, versions: list[str] | tuple[str, ...]) -> "Update":
        return Update(
            group_id=self.group_id,
            artifact_ids=self.artifact_ids,
            current_version=self.current_version,
            newer_versions=tuple(versions),
            newer_group_id=self.newer_group_id,
        )

    def show(self) -> str:
        artifacts = (
            f"({', '.join(self.artifact_ids)})" if self.is_group else self.artifact_id
        )
        group = self.group_id
        if self.newer_group_id and self.newer_group_id != self.group_id:
            group = f"{self.group_id} -> {self.newer_group_id}"
        versions = ", ".join(self.newer_versions)
        return f"{group}:{artifacts} : {self.current_version} -> {versions}"

    def __str__(self) -> str:
        return self.show()


class PullRequestState(str, Enum):
    OPEN = "open"
    CLOSED = "closed"


class PullRequestRecord(BaseModel):
    """A previously opened pull request for one (repo, dependency, version)."""

    model_config = ConfigDict(frozen=True)

    ref: str = Field(..., min_length=1)
    base_sha: str = Field(..., min_length=1)
    state: PullRequestState = PullRequestState.OPEN


RejectionKind = Literal[
    "not_allowed",
    "version_pinned",
    "ignored",
    "ignored_globally",
    "bad_versions",
]

_REJECTION_MESSAGES: Final[dict[str, str]] = {
    "not_allowed": "not explicitly allowed",
    "version_pinned": "no newer version matches pin",
    "ignored": "ignored by configuration",
    "ignored_globally": "ignored globally",
    "bad_versions": "no newer version left after removing known-bad versions",
}


class Rejection(BaseModel):
    """Why an update was not kept by a filter. A value, not an error."""

    model_config = ConfigDict(frozen=True)

    kind: RejectionKind
    update: Update

    @property
    def message(self) -> str:
        return _REJECTION_MESSAGES[self.kind]

    def __str__(self) -> str:
        return self.message


# Outcome of every update filter: the (possibly narrowed) update, or a rejection.
FilterResult = Union[Update, Rejection]


__all__ = [
    "Dependency",
    "FilterResult",
    "PullRequestRecord",
    "PullRequestState",
    "Rejection",
    "RejectionKind",
    "Repo",
    "Update",
    "strip_cross_suffix",
]
