"""
Change Detection
================

Per-pixel motion (or brightness) masks from luma-weighted magnitudes.

For each pixel the detector combines the three channel values of a
difference image as

    A = sqrt(0.299 * R^2 + 0.587 * G^2 + 0.114 * B^2)

and marks the pixel as foreground when A > d.

Modes:
    - temporal: channels are |current - reference|, the reference being
      the previous frame (zeros before the first frame)
    - static: channels are the current values themselves, which detects
      bright regions rather than motion
"""

import logging
from enum import Enum
from typing import Optional, Union

import cv2
import numpy as np

from doom_motion_agent.acquisition.decoder import DimensionMismatchError


logger = logging.getLogger(__name__)

# Weights for R, G, B in canonical channel order.
LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)


class DetectionMode(str, Enum):
    """How the difference image is formed."""

    TEMPORAL = "temporal"
    STATIC = "static"


def weighted_magnitude(channels: np.ndarray) -> np.ndarray:
    """
    Luma-weighted magnitude of a 3-channel image.

    Args:
        channels: (H, W, 3) array in RGB order, any numeric dtype

    Returns:
        (H, W) float64 array of A values
    """
    if channels.ndim != 3 or channels.shape[2] != 3:
        raise DimensionMismatchError(f"Expected (H, W, 3) array, got {channels.shape}")
    squared = np.square(channels.astype(np.float64))
    return np.sqrt(squared @ LUMA_WEIGHTS)


class ChangeDetector:
    """
    Produces a binary foreground mask for each frame.

    Holds the reference frame between calls; this is the only
    state the pipeline carries from one tick to the next.

    Attributes:
        mode: temporal or static
        threshold: Foreground iff weighted magnitude > threshold
    """

    def __init__(
        self,
        mode: Union[DetectionMode, str] = DetectionMode.TEMPORAL,
        threshold: float = 120.0,
    ) -> None:
        """
        Initialize change detector.

        Args:
            mode: Detection mode
            threshold: Magnitude threshold d

        Raises:
            ValueError: If threshold is negative
        """
        if threshold < 0:
            raise ValueError(f"threshold must be >= 0, got {threshold}")

        self.mode = DetectionMode(mode)
        self.threshold = float(threshold)

        self._reference: Optional[np.ndarray] = None

        logger.info(
            f"ChangeDetector initialized: mode={self.mode.value}, "
            f"threshold={self.threshold}"
        )

    def detect(self, pixels: np.ndarray) -> np.ndarray:
        """
        Compute the foreground mask for the current frame.

        The current frame becomes the reference for the next call.

        Args:
            pixels: Current RGB frame (H, W, 3), uint8

        Returns:
            Boolean mask (H, W)

        Raises:
            DimensionMismatchError: If the frame is malformed or its shape
                differs from the reference
        """
        if pixels.ndim != 3 or pixels.shape[2] != 3 or pixels.dtype != np.uint8:
            raise DimensionMismatchError(
                f"Frame must be (H, W, 3) uint8, got {pixels.shape} {pixels.dtype}"
            )

        if self._reference is not None and self._reference.shape != pixels.shape:
            raise DimensionMismatchError(
                f"Frame shape changed mid-run: "
                f"{self._reference.shape} -> {pixels.shape}"
            )

        if self.mode is DetectionMode.STATIC:
            difference = pixels
        elif self._reference is None:
            # No previous frame: compare against black
            difference = pixels
        else:
            difference = cv2.absdiff(pixels, self._reference)

        magnitude = weighted_magnitude(difference)
        mask = magnitude > self.threshold

        self._reference = pixels.copy()

        return mask

    @property
    def reference(self) -> Optional[np.ndarray]:
        """Frame the next call will be compared against (None before the first)."""
        return self._reference

    def reset(self) -> None:
        """Forget the reference frame."""
        self._reference = None
        logger.debug("ChangeDetector reset")
