"""
Frame Data Model
=================

Internal frame representation for the motion pipeline.

This module defines the typed Frame class that is used as the interface
between the game engine adapters and downstream processing stages.

Design Rules:
    - This is the ONLY frame format passed to downstream stages
    - Pixels are always (H, W, 3) uint8 in RGB order
    - Ancillary buffers are passed through unchanged
"""

from dataclasses import dataclass, field
from typing import Optional, Tuple

import numpy as np


@dataclass(frozen=True, slots=True, eq=False)
class Frame:
    """
    One rendered frame plus per-tick engine state.

    It is immutable (frozen) to prevent accidental modification of
    the reference while the detector still holds it.

    Attributes:
        tic: Engine state number
        pixels: RGB image (H, W, 3), uint8
        game_variables: Values of the configured game variables
        depth: Optional depth buffer (H, W)
        labels: Optional labels buffer (H, W)
        automap: Optional automap buffer
    """

    tic: int
    pixels: np.ndarray
    game_variables: Tuple[float, ...] = field(default_factory=tuple)
    depth: Optional[np.ndarray] = None
    labels: Optional[np.ndarray] = None
    automap: Optional[np.ndarray] = None

    @property
    def height(self) -> int:
        """Frame height in pixels."""
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        """Frame width in pixels."""
        return int(self.pixels.shape[1])

    @property
    def shape(self) -> Tuple[int, int]:
        """(height, width)."""
        return (self.height, self.width)

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the pixels."""
        return (
            f"Frame(tic={self.tic}, "
            f"size={self.width}x{self.height}, "
            f"vars={list(self.game_variables)})"
        )
