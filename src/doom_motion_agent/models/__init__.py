"""
Data Models
===========

Typed models passed through the motion pipeline.

Models:
    Blob:
        - Blob: One connected foreground cluster
    Action:
        - ActionKind: TURN_LEFT, TURN_RIGHT, FIRE
        - ActionSet: The three fixed action vectors
        - Selection: Action chosen for one tick
    Reasons:
        - ReasonCode: Why an action was chosen
    Tick:
        - TickResult: Output of one pipeline pass
        - EpisodeSummary: Aggregate statistics for one episode
"""

from doom_motion_agent.models.blob import Blob
from doom_motion_agent.models.reason_codes import ReasonCode
from doom_motion_agent.models.action import ActionKind, ActionSet, ActionVector, Selection
from doom_motion_agent.models.tick import EpisodeSummary, TickResult

__all__ = [
    "Blob",
    "ReasonCode",
    "ActionKind",
    "ActionSet",
    "ActionVector",
    "Selection",
    "TickResult",
    "EpisodeSummary",
]
