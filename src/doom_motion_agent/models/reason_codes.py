"""
Reason Codes
============

Fixed set of machine-readable reason codes for action selection.

Each selection carries exactly ONE reason code that explains why
that action was chosen.
"""

from enum import Enum


class ReasonCode(str, Enum):
    """
    Machine-readable selection explanation codes.

    Attributes:
        TARGET_LEFT: First blob lies left of the center band
        TARGET_RIGHT: First blob lies right of the center band
        TARGET_CENTERED: First blob lies inside the center band
        NO_MOTION: No foreground pixels in the mask
        ALL_BLOBS_FILTERED: Blobs existed but none survived the HUD cutoff
        RANDOM_CHOICE: Random policy, blobs ignored
    """

    # Target present
    TARGET_LEFT = "TARGET_LEFT"
    TARGET_RIGHT = "TARGET_RIGHT"
    TARGET_CENTERED = "TARGET_CENTERED"

    # Empty blob set
    NO_MOTION = "NO_MOTION"
    ALL_BLOBS_FILTERED = "ALL_BLOBS_FILTERED"

    RANDOM_CHOICE = "RANDOM_CHOICE"
