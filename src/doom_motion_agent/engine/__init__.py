"""
Engine Module
=============

Game engine backends for the episode runner.

Components:
    - GameEngine: Protocol every backend satisfies
    - DoomEngine: ViZDoom through its Python bindings
    - SyntheticEngine: Deterministic moving-target scene
    - EngineUnavailableError: Engine failed to deliver or accept

Design Philosophy:
    The pipeline only sees Frames and reward scalars. The engine is a
    pluggable black box behind that contract.
"""

from doom_motion_agent.engine.base import (
    EngineUnavailableError,
    GameEngine,
    SyntheticEngine,
)
from doom_motion_agent.engine.doom import DoomEngine

__all__ = [
    "EngineUnavailableError",
    "GameEngine",
    "SyntheticEngine",
    "DoomEngine",
]
