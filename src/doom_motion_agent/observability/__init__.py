"""
Observability Module
====================

Analytics and visualization for the DoomMotionAgent.

This module provides:
    - EpisodeAnalytics: Per-episode action/reason/blob counters
    - LabelVisualizer: Debug window of clustered motion (gated)

DESIGN RULES:
    - Does NOT import policy logic
    - Does NOT influence decisions
    - Zero cost when the window is disabled
"""

from doom_motion_agent.observability.analytics import EpisodeAnalytics
from doom_motion_agent.observability.visualization import LabelVisualizer


__all__ = [
    "EpisodeAnalytics",
    "LabelVisualizer",
]
