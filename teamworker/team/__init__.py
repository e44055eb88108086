"""Supervisor/worker team integration."""

from teamworker.team.state import StateDelta, TeamState, attributed_to
from teamworker.team.worker import SupervisorHandle, Worker, build_worker

__all__ = [
    "StateDelta",
    "SupervisorHandle",
    "TeamState",
    "Worker",
    "attributed_to",
    "build_worker",
]
