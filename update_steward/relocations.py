"""Known group id relocations.

Data only: each entry maps ``(old group, artifact)`` to ``(new group,
first version published under the new group)``. Extend the table to teach
update discovery about another move.
"""

from __future__ import annotations

from typing import Final, Optional

from .models import Dependency, Update

RELOCATIONS: Final[dict[tuple[str, str], tuple[str, str]]] = {
    ("org.spire-math", "kind-projector"): ("org.typelevel", "0.10.0"),
    ("com.github.mpilquist", "simulacrum"): ("org.typelevel", "1.0.0"),
    ("com.geirsson", "sbt-scalafmt"): ("org.scalameta", "2.0.0"),
    ("net.ceedubs", "ficus"): ("com.iheart", "1.3.4"),
}


def get_newer_group_id(group_id: str, artifact_id: str) -> Optional[tuple[str, str]]:
    return RELOCATIONS.get((group_id, artifact_id))


def find_update_under_new_group(dependency: Dependency) -> Optional[Update]:
    """Update moving ``dependency`` to its relocated group, if it has one."""
    relocation = get_newer_group_id(dependency.group_id, dependency.artifact_id)
    if relocation is None:
        return None
    new_group_id, from_version = relocation
    return dependency.to_update([from_version]).model_copy(
        update={"newer_group_id": new_group_id}
    )


__all__ = ["RELOCATIONS", "find_update_under_new_group", "get_newer_group_id"]
