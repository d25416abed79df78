"""
Action Models
=============

The three fixed control vectors and the per-tick selection result.

Action vectors are aligned with the engine's configured button order
and never change during the process lifetime.

Example:
    from doom_motion_agent.models.action import ActionKind, ActionSet

    actions = ActionSet.one_hot(3)
    actions.vector(ActionKind.FIRE)  # (0, 0, 1)
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

from doom_motion_agent.models.blob import Blob
from doom_motion_agent.models.reason_codes import ReasonCode


class ActionKind(str, Enum):
    """
    The three actions the selector can submit.

    Attributes:
        TURN_LEFT: Target is left of the center band (action A)
        TURN_RIGHT: Target is right of the center band (action B)
        FIRE: Target centered, or nothing to steer toward (action C)
    """

    TURN_LEFT = "TURN_LEFT"
    TURN_RIGHT = "TURN_RIGHT"
    FIRE = "FIRE"


ActionVector = Tuple[int, ...]


@dataclass(frozen=True, slots=True)
class ActionSet:
    """
    Fixed action vectors for one process.

    Attributes:
        turn_left: Vector submitted for TURN_LEFT
        turn_right: Vector submitted for TURN_RIGHT
        fire: Vector submitted for FIRE
    """

    turn_left: ActionVector
    turn_right: ActionVector
    fire: ActionVector

    def __post_init__(self) -> None:
        """Validate invariants."""
        sizes = {len(self.turn_left), len(self.turn_right), len(self.fire)}
        if len(sizes) != 1:
            raise ValueError(f"Action vectors must share one length, got {sorted(sizes)}")
        for vector in (self.turn_left, self.turn_right, self.fire):
            if any(value not in (0, 1) for value in vector):
                raise ValueError(f"Action vector must contain only 0 and 1: {vector}")

    @classmethod
    def from_lists(
        cls,
        turn_left: Sequence[int],
        turn_right: Sequence[int],
        fire: Sequence[int],
    ) -> "ActionSet":
        """Build from plain sequences (e.g. config lists)."""
        return cls(
            turn_left=tuple(int(v) for v in turn_left),
            turn_right=tuple(int(v) for v in turn_right),
            fire=tuple(int(v) for v in fire),
        )

    @classmethod
    def one_hot(cls, button_count: int = 3) -> "ActionSet":
        """
        One-hot vectors over the first three buttons.

        Button 0 turns left, button 1 turns right, button 2 fires.
        """
        if button_count < 3:
            raise ValueError(f"Need at least 3 buttons, got {button_count}")

        def hot(index: int) -> ActionVector:
            return tuple(1 if i == index else 0 for i in range(button_count))

        return cls(turn_left=hot(0), turn_right=hot(1), fire=hot(2))

    @property
    def size(self) -> int:
        """Number of buttons per vector."""
        return len(self.fire)

    def vector(self, kind: ActionKind) -> ActionVector:
        """Vector for an action kind."""
        if kind is ActionKind.TURN_LEFT:
            return self.turn_left
        if kind is ActionKind.TURN_RIGHT:
            return self.turn_right
        return self.fire


@dataclass(frozen=True, slots=True)
class Selection:
    """
    Action chosen for one tick.

    Attributes:
        kind: Which of the three actions
        vector: Vector to submit to the engine
        reason: Why it was chosen
        target: Blob steered toward, None when the blob set was empty
    """

    kind: ActionKind
    vector: ActionVector
    reason: ReasonCode
    target: Optional[Blob] = None

    @property
    def has_target(self) -> bool:
        """Whether a blob was available to steer toward."""
        return self.target is not None

    def __repr__(self) -> str:
        return (
            f"Selection(kind={self.kind.value}, "
            f"reason={self.reason.value}, "
            f"target={self.target!r})"
        )
