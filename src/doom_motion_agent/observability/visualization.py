"""
Visualization Module
====================

Debug view of the clustered motion pixels.

This module renders PURELY DESCRIPTIVE images.
Visualizations do NOT influence action selection.

Rendering:
    - Dimmed grayscale copy of the frame as background
    - Every labelled point painted in its label's colour
    - Surviving centroids circled, the fire band and HUD cutoff drawn

GATED BY CONFIG FLAG. Zero cost when disabled.
"""

import logging
import time
from typing import Optional

import cv2
import numpy as np

from doom_motion_agent.acquisition.decoder import to_grayscale
from doom_motion_agent.acquisition.frame import Frame
from doom_motion_agent.models.tick import TickResult


logger = logging.getLogger(__name__)

BAND_COLOR = (0, 160, 0)
CUTOFF_COLOR = (0, 0, 160)
CENTROID_COLOR = (255, 255, 255)


class LabelVisualizer:
    """
    Render and optionally display the per-label colour image.

    GATED: render() and show() do nothing when disabled.
    """

    def __init__(
        self,
        enabled: bool = False,
        window_name: str = "diff",
        wait_key_ms: int = 1,
        margin: float = 25.0,
        hud_cutoff_ratio: float = 0.56,
        seed: Optional[int] = None,
    ) -> None:
        """
        Initialize visualizer.

        Args:
            enabled: Whether the debug window is shown
            window_name: OpenCV window name
            wait_key_ms: cv2.waitKey delay after each frame
            margin: Fire band half-width to draw
            hud_cutoff_ratio: HUD cutoff line to draw
            seed: Seed for label colours
        """
        self.enabled = enabled
        self.window_name = window_name
        self.wait_key_ms = wait_key_ms
        self.margin = margin
        self.hud_cutoff_ratio = hud_cutoff_ratio
        self._rng = np.random.default_rng(seed)
        self._window_open = False

        if enabled:
            logger.info(f"LabelVisualizer enabled: window='{window_name}'")
        else:
            logger.info("LabelVisualizer disabled (zero cost)")

    def render(self, frame: Frame, result: TickResult) -> Optional[np.ndarray]:
        """
        Build the debug image (BGR, for OpenCV display).

        Args:
            frame: Frame the result was computed from
            result: Pipeline output

        Returns:
            BGR image (H, W, 3) or None when disabled
        """
        if not self.enabled:
            return None

        start_time = time.time()

        gray = to_grayscale(frame.pixels) // 4
        image = cv2.cvtColor(gray, cv2.COLOR_GRAY2BGR)

        n_labels = result.label_count
        if n_labels:
            colors = self._rng.integers(0, 256, size=(n_labels, 3), dtype=np.uint8)
            xs = result.points[:, 0]
            ys = result.points[:, 1]
            image[ys, xs] = colors[result.labels]

        height, width = frame.shape
        center = width / 2
        for x in (center - self.margin, center + self.margin):
            cv2.line(image, (int(x), 0), (int(x), height - 1), BAND_COLOR, 1)
        cutoff = int(self.hud_cutoff_ratio * height)
        cv2.line(image, (0, cutoff), (width - 1, cutoff), CUTOFF_COLOR, 1)

        for blob in result.kept_blobs:
            cv2.circle(
                image,
                (int(blob.centroid_x), int(blob.centroid_y)),
                4,
                CENTROID_COLOR,
                1,
            )

        elapsed_ms = (time.time() - start_time) * 1000
        if elapsed_ms > 50:
            logger.warning(f"Label render took {elapsed_ms:.1f}ms (>50ms threshold)")

        return image

    def show(self, frame: Frame, result: TickResult) -> None:
        """Render and display in the debug window."""
        image = self.render(frame, result)
        if image is None:
            return
        if not self._window_open:
            cv2.namedWindow(self.window_name, cv2.WINDOW_AUTOSIZE)
            self._window_open = True
        cv2.imshow(self.window_name, image)
        cv2.waitKey(self.wait_key_ms)

    def close(self) -> None:
        """Destroy the debug window if it was opened."""
        if self._window_open:
            cv2.destroyWindow(self.window_name)
            self._window_open = False

    @property
    def is_enabled(self) -> bool:
        """Check if visualization is enabled."""
        return self.enabled
