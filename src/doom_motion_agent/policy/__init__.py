"""
Policy Module
=============

Action selection from filtered blobs.

Components:
    - ActionPolicy: Protocol for selectors
    - CentroidActionSelector: Center-band steering (default)
    - RandomActionSelector: Uniform random actions
"""

from doom_motion_agent.policy.selector import (
    ActionPolicy,
    CentroidActionSelector,
    RandomActionSelector,
)

__all__ = [
    "ActionPolicy",
    "CentroidActionSelector",
    "RandomActionSelector",
]
