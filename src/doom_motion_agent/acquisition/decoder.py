"""
Screen Buffer Decoder
=====================

Dedicated module for turning engine screen buffers into RGB matrices.

Design Rules:
    - This is the ONLY place in the codebase that interprets channel order
    - Canonical order downstream is RGB, (H, W, 3), uint8
    - Fails fast when the buffer does not match the declared size
"""

import logging
from enum import Enum
from typing import Union

import cv2
import numpy as np


logger = logging.getLogger(__name__)

CHANNELS = 3


class ScreenFormat(str, Enum):
    """
    Packed screen buffer layouts understood by the decoder.

    Attributes:
        RGB24: Interleaved, row-major, R then G then B
        BGR24: Interleaved, row-major, B then G then R
        CRCGCB: Planar, one full plane per channel in R, G, B order
    """

    RGB24 = "RGB24"
    BGR24 = "BGR24"
    CRCGCB = "CRCGCB"


class DimensionMismatchError(Exception):
    """Raised when a buffer or frame does not match the expected dimensions."""
    pass


def decode_screen_buffer(
    buffer: Union[bytes, bytearray, np.ndarray],
    width: int,
    height: int,
    screen_format: Union[ScreenFormat, str] = ScreenFormat.RGB24,
) -> np.ndarray:
    """
    Decode a packed screen buffer into an RGB image.

    Args:
        buffer: Packed pixels (bytes or any-shaped uint8 array)
        width: Declared frame width
        height: Declared frame height
        screen_format: Layout of the buffer

    Returns:
        RGB image as np.ndarray (H, W, 3), dtype=uint8

    Raises:
        DimensionMismatchError: If the buffer length is not width*height*3
    """
    screen_format = ScreenFormat(screen_format)

    if isinstance(buffer, (bytes, bytearray)):
        flat = np.frombuffer(buffer, dtype=np.uint8)
    else:
        flat = np.asarray(buffer)
        if flat.dtype != np.uint8:
            raise DimensionMismatchError(
                f"Screen buffer must be uint8, got {flat.dtype}"
            )
        flat = flat.reshape(-1)

    expected = width * height * CHANNELS
    if flat.size != expected:
        raise DimensionMismatchError(
            f"Screen buffer has {flat.size} bytes, expected "
            f"{width}x{height}x{CHANNELS}={expected}"
        )

    if screen_format is ScreenFormat.CRCGCB:
        rgb = flat.reshape(CHANNELS, height, width).transpose(1, 2, 0)
        return np.ascontiguousarray(rgb)

    image = flat.reshape(height, width, CHANNELS)
    if screen_format is ScreenFormat.BGR24:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)

    return image.copy()


def encode_screen_buffer(
    rgb: np.ndarray,
    screen_format: Union[ScreenFormat, str] = ScreenFormat.RGB24,
) -> bytes:
    """
    Pack an RGB image into a screen buffer layout.

    Used by the synthetic engine to produce buffers the same way
    the real engine delivers them.

    Args:
        rgb: RGB image (H, W, 3), uint8
        screen_format: Target layout

    Returns:
        Packed bytes
    """
    screen_format = ScreenFormat(screen_format)

    if rgb.ndim != 3 or rgb.shape[2] != CHANNELS:
        raise DimensionMismatchError(f"Expected (H, W, 3) image, got {rgb.shape}")

    if screen_format is ScreenFormat.CRCGCB:
        return np.ascontiguousarray(rgb.transpose(2, 0, 1)).tobytes()
    if screen_format is ScreenFormat.BGR24:
        return cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR).tobytes()
    return np.ascontiguousarray(rgb).tobytes()


def to_grayscale(rgb: np.ndarray) -> np.ndarray:
    """
    Convert an RGB frame to single-channel luma.

    Args:
        rgb: RGB image (H, W, 3), uint8

    Returns:
        Grayscale image (H, W), uint8
    """
    if rgb.ndim != 3 or rgb.shape[2] != CHANNELS:
        raise DimensionMismatchError(f"Expected (H, W, 3) image, got {rgb.shape}")
    return cv2.cvtColor(rgb, cv2.COLOR_RGB2GRAY)
