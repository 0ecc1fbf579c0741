import pytest

from update_steward.models import Rejection, Update
from update_steward.repo_config import UpdatesConfig
from update_steward.update_pattern import UpdatePattern, VersionMatch


def _update(
    group: str = "eu.timepit",
    artifact: str = "refined",
    current: str = "0.7.0",
    newer: tuple[str, ...] = ("0.8.5", "0.9.0"),
) -> Update:
    return Update(group_id=group, artifact_ids=(artifact,), current_version=current, newer_versions=newer)


def test_empty_config_keeps_everything():
    update = _update()
    assert UpdatesConfig().keep(update) == update


def test_allow_and_pin_narrow_candidates():
    config = UpdatesConfig(
        allow=[UpdatePattern(group_id="eu.timepit")],
        pin=[
            UpdatePattern(
                group_id="eu.timepit", artifact_id="refined", version=VersionMatch(prefix="0.8.")
            )
        ],
    )
    result = config.keep(_update())
    assert isinstance(result, Update)
    assert result.newer_versions == ("0.8.5",)
    assert result.next_version == "0.8.5"


def test_not_allowed():
    config = UpdatesConfig(allow=[UpdatePattern(group_id="org.typelevel")])
    result = config.keep(_update())
    assert isinstance(result, Rejection)
    assert result.kind == "not_allowed"
    assert str(result) == "not explicitly allowed"


def test_allow_version_is_matched_against_current_version():
    config = UpdatesConfig(
        allow=[UpdatePattern(group_id="eu.timepit", version=VersionMatch(prefix="0.7."))]
    )
    assert config.keep(_update(current="0.7.0")) == _update(current="0.7.0")
    rejected = config.keep(_update(current="0.6.0"))
    assert isinstance(rejected, Rejection) and rejected.kind == "not_allowed"


def test_allow_without_version_never_rejects_on_version():
    config = UpdatesConfig(allow=[UpdatePattern(group_id="eu.timepit", artifact_id="refined")])
    for current, newer in [("0.1", ("9.9",)), ("1.0-RC1", ("1.0",)), ("x", ("y", "z"))]:
        update = _update(current=current, newer=newer)
        assert config.keep(update) == update


def test_pin_without_any_matching_version_rejects():
    config = UpdatesConfig(
        pin=[UpdatePattern(group_id="eu.timepit", version=VersionMatch(prefix="0.10."))]
    )
    result = config.keep(_update())
    assert isinstance(result, Rejection)
    assert result.kind == "version_pinned"
    assert result.message == "no newer version matches pin"


def test_pin_for_other_artifact_does_not_apply():
    config = UpdatesConfig(
        pin=[
            UpdatePattern(
                group_id="eu.timepit", artifact_id="refined-cats", version=VersionMatch(prefix="0.1.")
            )
        ]
    )
    update = _update()
    assert config.keep(update) == update


@pytest.mark.parametrize(
    "newer,pin,expected",
    [
        (("28.0-android", "28.0-jre", "28.1-jre"), VersionMatch(suffix="jre"), ("28.0-jre", "28.1-jre")),
        (("28.0-jre", "29.0-jre"), VersionMatch(prefix="28.", suffix="jre"), ("28.0-jre",)),
        (("0.8.5", "0.9.0"), None, ("0.8.5", "0.9.0")),
    ],
)
def test_pin_result_is_intersection(newer, pin, expected):
    config = UpdatesConfig(pin=[UpdatePattern(group_id="com.google.guava", version=pin)])
    result = config.keep(_update(group="com.google.guava", artifact="guava", current="27.0-jre", newer=newer))
    assert isinstance(result, Update)
    assert result.newer_versions == expected


def test_ignore_without_version_always_rejects_even_if_allowed():
    config = UpdatesConfig(
        allow=[UpdatePattern(group_id="eu.timepit")],
        ignore=[UpdatePattern(group_id="eu.timepit", artifact_id="refined")],
    )
    result = config.keep(_update())
    assert isinstance(result, Rejection)
    assert result.kind == "ignored"
    assert str(result) == "ignored by configuration"


def test_ignore_with_version_drops_only_matching_candidates():
    config = UpdatesConfig(
        ignore=[UpdatePattern(group_id="eu.timepit", version=VersionMatch(prefix="0.9."))]
    )
    result = config.keep(_update())
    assert isinstance(result, Update)
    assert result.newer_versions == ("0.8.5",)


def test_ignore_with_version_matching_all_candidates_rejects():
    config = UpdatesConfig(
        ignore=[UpdatePattern(group_id="eu.timepit", version=VersionMatch(prefix="0."))]
    )
    result = config.keep(_update())
    assert isinstance(result, Rejection) and result.kind == "ignored"


def test_ignore_whole_group_covers_cross_built_artifacts():
    config = UpdatesConfig(ignore=[UpdatePattern(group_id="eu.timepit")])
    result = config.keep(_update(artifact="refined_2.13"))
    assert isinstance(result, Rejection)


def test_pin_applies_before_ignore():
    config = UpdatesConfig(
        pin=[UpdatePattern(group_id="eu.timepit", version=VersionMatch(prefix="0.9."))],
        ignore=[UpdatePattern(group_id="eu.timepit", version=VersionMatch(prefix="0.9.0"))],
    )
    result = config.keep(_update(newer=("0.8.5", "0.9.0", "0.9.1")))
    assert isinstance(result, Update)
    assert result.newer_versions == ("0.9.1",)
