"""
Test Configuration
==================

Pytest fixtures and test configuration for DoomMotionAgent.
"""

import numpy as np
import pytest


WIDTH = 320
HEIGHT = 240


@pytest.fixture
def frame_size():
    """Default (width, height) used across tests."""
    return WIDTH, HEIGHT


@pytest.fixture
def black_pixels():
    """All-black RGB frame."""
    return np.zeros((HEIGHT, WIDTH, 3), dtype=np.uint8)


@pytest.fixture
def white_pixels():
    """All-white RGB frame."""
    return np.full((HEIGHT, WIDTH, 3), 255, dtype=np.uint8)


@pytest.fixture
def make_pixels():
    """Factory for a black frame with white rectangles at (x, y, w, h)."""

    def _make(*rects, width=WIDTH, height=HEIGHT):
        pixels = np.zeros((height, width, 3), dtype=np.uint8)
        for x, y, w, h in rects:
            pixels[y:y + h, x:x + w] = 255
        return pixels

    return _make


@pytest.fixture
def make_frame(make_pixels):
    """Factory for Frames built like make_pixels."""
    from doom_motion_agent.acquisition.frame import Frame

    def _make(*rects, tic=0, width=WIDTH, height=HEIGHT):
        return Frame(tic=tic, pixels=make_pixels(*rects, width=width, height=height))

    return _make


@pytest.fixture
def action_set():
    """Default one-hot action vectors over three buttons."""
    from doom_motion_agent.models.action import ActionSet

    return ActionSet.one_hot(3)


@pytest.fixture
def make_blob():
    """Factory for Blobs from a centroid."""
    from doom_motion_agent.models.blob import Blob

    def _make(x, y, label=0, pixel_count=1):
        return Blob(label=label, centroid_x=x, centroid_y=y, pixel_count=pixel_count)

    return _make


@pytest.fixture
def clean_env(monkeypatch):
    """Remove DOOM_AGENT_* overrides from the environment."""
    import os

    for key in list(os.environ):
        if key.startswith("DOOM_AGENT_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch
