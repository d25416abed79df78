"""
DoomMotionAgent
===============

Motion-driven steering for a ViZDoom player.

Every tick the agent compares the rendered frame with the previous one,
clusters the changed pixels into blobs, ignores blobs in the HUD area,
and turns toward (or fires at) the first remaining blob.

Components:
    - acquisition: Frame model and screen buffer decoding
    - engine: ViZDoom and synthetic engine backends
    - vision: Change detection, blob extraction, HUD filter
    - policy: Action selection
    - signals: Per-run motion pipeline session
    - observability: Episode analytics and debug window

Example:
    doom-motion-agent --engine synthetic --episodes 2
"""

__version__ = "0.1.0"

__all__ = [
    "__version__",
]
