"""
Blob Models
===========

Data models for motion blobs extracted from a frame.

Produced by the blob extractor, narrowed by the blob filter and
consumed by the action selector within the same tick.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True, slots=True)
class Blob:
    """
    One connected cluster of foreground pixels.

    Attributes:
        label: Cluster label, unique within the tick
        centroid_x: Mean x (column) of member points
        centroid_y: Mean y (row) of member points
        pixel_count: Number of member points
    """

    label: int
    centroid_x: float
    centroid_y: float
    pixel_count: int

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.label < 0:
            raise ValueError("label must be non-negative")
        if self.pixel_count < 1:
            raise ValueError("pixel_count must be positive")

    @property
    def centroid(self) -> Tuple[float, float]:
        """Centroid as (x, y)."""
        return (self.centroid_x, self.centroid_y)

    def __repr__(self) -> str:
        return (
            f"Blob(label={self.label}, "
            f"centroid=({self.centroid_x:.1f}, {self.centroid_y:.1f}), "
            f"pixels={self.pixel_count})"
        )

    def to_dict(self) -> dict:
        """Export as dictionary for logging/serialization."""
        return {
            "label": self.label,
            "centroid_x": round(self.centroid_x, 3),
            "centroid_y": round(self.centroid_y, 3),
            "pixel_count": self.pixel_count,
        }
