"""
Acquisition Module
==================

Frame representation and screen buffer decoding.

This module provides:
    - Frame: Immutable per-tick frame with RGB pixels and engine state
    - decode_screen_buffer: Packed buffer -> canonical RGB image
    - DimensionMismatchError: Buffer/frame size contract violation
"""

from doom_motion_agent.acquisition.frame import Frame
from doom_motion_agent.acquisition.decoder import (
    DimensionMismatchError,
    ScreenFormat,
    decode_screen_buffer,
    encode_screen_buffer,
    to_grayscale,
)

__all__ = [
    "Frame",
    "DimensionMismatchError",
    "ScreenFormat",
    "decode_screen_buffer",
    "encode_screen_buffer",
    "to_grayscale",
]
