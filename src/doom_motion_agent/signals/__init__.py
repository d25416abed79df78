"""
Signals Module
==============

Per-tick signal processing that turns frames into actions.
"""

from doom_motion_agent.signals.motion_processor import (
    MotionSignalProcessor,
    PipelineConfigError,
)

__all__ = ["MotionSignalProcessor", "PipelineConfigError"]
