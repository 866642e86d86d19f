"""Host process supervision and forced termination."""

from zotero_runner.process.supervisor import ProcessSupervisor, build_args, find_free_tcp_port
from zotero_runner.process.termination import (
    CommandOverrideStrategy,
    KillStrategy,
    force_kill,
    is_process_running,
    select_kill_strategy,
)

__all__ = [
    "CommandOverrideStrategy",
    "KillStrategy",
    "ProcessSupervisor",
    "build_args",
    "find_free_tcp_port",
    "force_kill",
    "is_process_running",
    "select_kill_strategy",
]
