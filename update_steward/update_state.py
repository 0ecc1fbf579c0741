"""Reconciliation verdicts for one dependency of one repository.

``UpdateState`` is a discriminated union over six frozen models. Consumers
dispatch with ``isinstance`` and end with ``assert_never`` so that a new
variant fails type checking until every consumer handles it.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union, assert_never

from pydantic import BaseModel, ConfigDict, Field

from .models import Dependency, Rejection, Update


class DependencyUpToDate(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["dependency_up_to_date"] = "dependency_up_to_date"
    dependency: Dependency

    def __str__(self) -> str:
        return f"DependencyUpToDate({self.dependency})"


class UpdateRejectedByConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["update_rejected_by_config"] = "update_rejected_by_config"
    dependency: Dependency
    reason: Rejection

    def __str__(self) -> str:
        return f"UpdateRejectedByConfig({self.dependency}, {self.reason})"


class DependencyOutdated(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["dependency_outdated"] = "dependency_outdated"
    dependency: Dependency
    update: Update

    def __str__(self) -> str:
        return f"DependencyOutdated({self.dependency}, {self.update})"


class PullRequestUpToDate(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["pull_request_up_to_date"] = "pull_request_up_to_date"
    dependency: Dependency
    update: Update
    pr_ref: str

    def __str__(self) -> str:
        return f"PullRequestUpToDate({self.dependency}, {self.update}, {self.pr_ref})"


class PullRequestOutdated(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["pull_request_outdated"] = "pull_request_outdated"
    dependency: Dependency
    update: Update
    pr_ref: str

    def __str__(self) -> str:
        return f"PullRequestOutdated({self.dependency}, {self.update}, {self.pr_ref})"


class PullRequestClosed(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["pull_request_closed"] = "pull_request_closed"
    dependency: Dependency
    update: Update
    pr_ref: str

    def __str__(self) -> str:
        return f"PullRequestClosed({self.dependency}, {self.update}, {self.pr_ref})"


UpdateState = Annotated[
    Union[
        DependencyUpToDate,
        UpdateRejectedByConfig,
        DependencyOutdated,
        PullRequestUpToDate,
        PullRequestOutdated,
        PullRequestClosed,
    ],
    Field(discriminator="kind"),
]


def is_outdated(state: UpdateState) -> bool:
    """True for the states the caller has to act on."""
    if isinstance(state, (DependencyOutdated, PullRequestOutdated)):
        return True
    if isinstance(
        state,
        (DependencyUpToDate, UpdateRejectedByConfig, PullRequestUpToDate, PullRequestClosed),
    ):
        return False
    assert_never(state)


def update_of(state: UpdateState) -> Optional[Update]:
    if isinstance(state, (DependencyUpToDate, UpdateRejectedByConfig)):
        return None
    if isinstance(state, (DependencyOutdated, PullRequestUpToDate, PullRequestOutdated, PullRequestClosed)):
        return state.update
    assert_never(state)


__all__ = [
    "DependencyOutdated",
    "DependencyUpToDate",
    "PullRequestClosed",
    "PullRequestOutdated",
    "PullRequestUpToDate",
    "UpdateRejectedByConfig",
    "UpdateState",
    "is_outdated",
    "update_of",
]
