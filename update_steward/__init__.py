"""Decision core of an automated dependency-update agent.

Exports the centralized logging configuration and the reconciliation
entry points.
"""

from .logging_config import configure_logging  # re-export for convenience
from .repo_config_parser import parse_repo_config, read_repo_config_with_default
from .update_alg import check_for_updates, find_all_update_states, needs_attention

__all__ = [
    "check_for_updates",
    "configure_logging",
    "find_all_update_states",
    "needs_attention",
    "parse_repo_config",
    "read_repo_config_with_default",
]
