from typing import Optional

import pytest
from pydantic import TypeAdapter

from update_steward.models import Dependency, PullRequestRecord, PullRequestState, Update
from update_steward.repo_config import RepoConfig, UpdatesConfig
from update_steward.update_alg import resolve_update_state, select_actionable
from update_steward.update_pattern import UpdatePattern, VersionMatch
from update_steward.update_state import (
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

SHA = "a1b2c3"
PR = "https://github.com/fthomas/scala-steward/pull/42"

DEP = Dependency(group_id="eu.timepit", artifact_id="refined", version="0.7.0")
UPDATE = Update(
    group_id="eu.timepit", artifact_ids=["refined"], current_version="0.7.0", newer_versions=["0.8.5", "0.9.0"]
)


def _pr(base_sha: str, state: PullRequestState = PullRequestState.OPEN) -> PullRequestRecord:
    return PullRequestRecord(ref=PR, base_sha=base_sha, state=state)


def _resolve(
    update: Optional[Update] = UPDATE,
    config: RepoConfig = RepoConfig(),
    pull_request: Optional[PullRequestRecord] = None,
) -> UpdateState:
    return resolve_update_state(DEP, update, config, pull_request, SHA)


def test_no_update_is_up_to_date():
    assert _resolve(update=None) == DependencyUpToDate(dependency=DEP)


def test_rejected_by_config_carries_reason():
    config = RepoConfig(updates=UpdatesConfig(ignore=[UpdatePattern(group_id="eu.timepit")]))
    state = _resolve(config=config)
    assert isinstance(state, UpdateRejectedByConfig)
    assert state.reason.kind == "ignored"
    assert str(state) == "UpdateRejectedByConfig(eu.timepit:refined:0.7.0, ignored by configuration)"


def test_no_pull_request_is_outdated():
    assert _resolve() == DependencyOutdated(dependency=DEP, update=UPDATE)


def test_pull_request_on_current_commit_is_up_to_date():
    assert _resolve(pull_request=_pr(SHA)) == PullRequestUpToDate(dependency=DEP, update=UPDATE, pr_ref=PR)


def test_pull_request_on_older_commit_is_outdated():
    state = _resolve(pull_request=_pr("0ld5ha"))
    assert isinstance(state, PullRequestOutdated)
    assert not isinstance(state, (DependencyOutdated, PullRequestUpToDate))
    assert state.pr_ref == PR


@pytest.mark.parametrize("base_sha", [SHA, "0ld5ha"])
def test_closed_pull_request_wins_over_staleness(base_sha: str):
    state = _resolve(pull_request=_pr(base_sha, PullRequestState.CLOSED))
    assert state == PullRequestClosed(dependency=DEP, update=UPDATE, pr_ref=PR)


def test_state_carries_pinned_update():
    config = RepoConfig(
        updates=UpdatesConfig(
            pin=[UpdatePattern(group_id="eu.timepit", version=VersionMatch(prefix="0.8."))]
        )
    )
    state = _resolve(config=config)
    assert isinstance(state, DependencyOutdated)
    assert state.update.newer_versions == ("0.8.5",)


def test_resolution_is_deterministic():
    inputs = [
        (UPDATE, RepoConfig(), None),
        (UPDATE, RepoConfig(), _pr("0ld5ha")),
        (None, RepoConfig(), None),
    ]
    first = [resolve_update_state(DEP, u, c, p, SHA) for u, c, p in inputs]
    second = [resolve_update_state(DEP, u, c, p, SHA) for u, c, p in inputs]
    assert first == second
    assert [str(s) for s in first] == [str(s) for s in second]


def test_only_outdated_states_need_action():
    rejected = _resolve(config=RepoConfig(updates=UpdatesConfig(ignore=[UpdatePattern(group_id="eu.timepit")])))
    states = [
        _resolve(update=None),
        rejected,
        _resolve(),
        _resolve(pull_request=_pr(SHA)),
        _resolve(pull_request=_pr("0ld5ha")),
        _resolve(pull_request=_pr(SHA, PullRequestState.CLOSED)),
    ]
    assert [is_outdated(s) for s in states] == [False, False, True, False, True, False]
    assert [update_of(s) is not None for s in states] == [False, False, True, True, True, True]


def test_select_actionable_respects_limit():
    states = [_resolve(), _resolve(pull_request=_pr("0ld5ha")), _resolve(update=None)]
    assert select_actionable(states) == [UPDATE, UPDATE]
    assert select_actionable(states, limit=1) == [UPDATE]


def test_string_forms():
    assert str(_resolve(update=None)) == "DependencyUpToDate(eu.timepit:refined:0.7.0)"
    assert (
        str(_resolve())
        == "DependencyOutdated(eu.timepit:refined:0.7.0, eu.timepit:refined : 0.7.0 -> 0.8.5, 0.9.0)"
    )
    assert str(_resolve(pull_request=_pr("0ld5ha"))).startswith("PullRequestOutdated(")
    assert str(_resolve(pull_request=_pr("0ld5ha"))).endswith(f", {PR})")


def test_states_roundtrip_through_discriminated_union():
    adapter = TypeAdapter(UpdateState)
    state = _resolve(pull_request=_pr("0ld5ha"))
    assert adapter.validate_python(state.model_dump()) == state
