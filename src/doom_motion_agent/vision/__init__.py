"""
Vision Module
=============

Motion detection and blob extraction on decoded frames.

This module provides:
    - ChangeDetector: Luma-weighted temporal or static thresholding
    - BlobExtractor: Single-link clustering into blobs with centroids
    - filter_blobs: HUD cutoff on blob centroids

No tracking across ticks; the detector's reference frame is the only
carried state.
"""

from doom_motion_agent.vision.change_detector import (
    ChangeDetector,
    DetectionMode,
    weighted_magnitude,
)
from doom_motion_agent.vision.blobs import (
    BlobExtraction,
    BlobExtractor,
    compute_blobs,
    find_foreground_points,
    partition_points,
)
from doom_motion_agent.vision.blob_filter import filter_blobs

__all__ = [
    # Detection
    "ChangeDetector",
    "DetectionMode",
    "weighted_magnitude",
    # Extraction
    "BlobExtraction",
    "BlobExtractor",
    "compute_blobs",
    "find_foreground_points",
    "partition_points",
    # Filtering
    "filter_blobs",
]
