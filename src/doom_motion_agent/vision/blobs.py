"""
Blob Extraction
===============

Single-link clustering of foreground pixels and per-cluster centroids.

Two foreground points belong to the same blob when a chain of points
connects them in which every consecutive pair is closer than
``max_distance`` (Euclidean, strict). The relation is transitive, so
the two farthest members of a blob can be much farther apart.

Algorithm:
    Points lie on the pixel grid, which allows an exact shortcut:
        1. Pixel adjacency is always a link when max_distance > sqrt(2),
           so 8-connected components (cv2.connectedComponents) are
           merged up front.
        2. The closest pair between two disjoint regions always lies on
           their boundaries, so only boundary pixels are compared.
        3. Boundary pixels are bucketed into max_distance-sized cells and
           compared against the neighbouring cells only; linked component
           pairs are merged with union-find as they are found.
        4. Cell pairs whose points already share one cluster are skipped,
           so a frame dominated by one large blob costs little.

Labels are numbered 0..n-1 by first appearance in scan order, so the
blob containing the top-most, left-most point is label 0.
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import cv2
import numpy as np

from doom_motion_agent.models.blob import Blob


logger = logging.getLogger(__name__)

SQRT2 = math.sqrt(2.0)

# Half of the 3x3 cell neighbourhood; each unordered cell pair is visited once.
_HALF_NEIGHBOURHOOD = ((0, 0), (1, 0), (-1, 1), (0, 1), (1, 1))


def find_foreground_points(mask: np.ndarray) -> np.ndarray:
    """
    Enumerate nonzero mask pixels in row-major scan order.

    Args:
        mask: (H, W) boolean or integer mask

    Returns:
        (N, 2) int64 array of (x, y) coordinates
    """
    if mask.ndim != 2:
        raise ValueError(f"Mask must be 2D, got shape {mask.shape}")

    nonzero = cv2.findNonZero(mask.astype(np.uint8))
    if nonzero is None:
        return np.empty((0, 2), dtype=np.int64)
    return nonzero.reshape(-1, 2).astype(np.int64)


class _UnionFind:
    """Disjoint sets over 0..n-1 with path halving."""

    def __init__(self, size: int) -> None:
        self.parent = list(range(size))

    def find(self, item: int) -> int:
        parent = self.parent
        while parent[item] != item:
            parent[item] = parent[parent[item]]
            item = parent[item]
        return item

    def union(self, a: int, b: int) -> None:
        root_a = self.find(a)
        root_b = self.find(b)
        if root_a != root_b:
            # Smaller root wins so results do not depend on pair order
            if root_a < root_b:
                self.parent[root_b] = root_a
            else:
                self.parent[root_a] = root_b


@dataclass(frozen=True, slots=True)
class _Cell:
    """Boundary points of one max_distance-sized grid cell."""

    xs: np.ndarray
    ys: np.ndarray
    components: np.ndarray


def _bucket_by_cell(
    xs: np.ndarray,
    ys: np.ndarray,
    components: np.ndarray,
    max_distance: float,
) -> Dict[Tuple[int, int], _Cell]:
    """Group boundary points by the grid cell they fall in."""
    cells = np.stack(
        [np.floor(xs / max_distance), np.floor(ys / max_distance)], axis=1
    ).astype(np.int64)
    unique_cells, inverse = np.unique(cells, axis=0, return_inverse=True)
    inverse = inverse.reshape(-1)

    order = np.argsort(inverse, kind="stable")
    bounds = np.cumsum(np.bincount(inverse, minlength=len(unique_cells)))[:-1]

    buckets: Dict[Tuple[int, int], _Cell] = {}
    for (cx, cy), members in zip(unique_cells.tolist(), np.split(order, bounds)):
        buckets[(cx, cy)] = _Cell(
            xs=xs[members],
            ys=ys[members],
            components=components[members],
        )
    return buckets


def _merge_linked_components(
    xs: np.ndarray,
    ys: np.ndarray,
    components: np.ndarray,
    max_distance: float,
    sets: _UnionFind,
) -> int:
    """
    Union components that have a point pair closer than max_distance.

    A cell pair is only compared when its points span more than one
    current cluster, and only point pairs from different clusters count.

    Args:
        xs: Boundary x coordinates
        ys: Boundary y coordinates
        components: Component id per boundary point
        max_distance: Linkage distance
        sets: Union-find over component ids, updated in place

    Returns:
        Number of cell pairs that needed a distance check
    """
    limit = max_distance * max_distance
    buckets = _bucket_by_cell(xs, ys, components, max_distance)

    compared = 0
    for (cx, cy), cell in buckets.items():
        for dx, dy in _HALF_NEIGHBOURHOOD:
            other = buckets.get((cx + dx, cy + dy))
            if other is None:
                continue

            ids = np.unique(np.concatenate([cell.components, other.components]))
            if ids.size == 1:
                continue
            id_roots = np.array([sets.find(i) for i in ids.tolist()], dtype=np.int64)
            if np.all(id_roots == id_roots[0]):
                continue

            compared += 1
            roots_a = id_roots[np.searchsorted(ids, cell.components)]
            roots_b = id_roots[np.searchsorted(ids, other.components)]

            delta_x = cell.xs[:, None] - other.xs[None, :]
            delta_y = cell.ys[:, None] - other.ys[None, :]
            linked = delta_x * delta_x + delta_y * delta_y < limit
            linked &= roots_a[:, None] != roots_b[None, :]

            rows, cols = np.nonzero(linked)
            if rows.size == 0:
                continue

            pairs = np.unique(np.stack([roots_a[rows], roots_b[cols]], axis=1), axis=0)
            for a, b in pairs.tolist():
                sets.union(a, b)

    return compared


def _cluster_image(mask: np.ndarray, max_distance: float) -> np.ndarray:
    """
    Cluster id for every pixel of a mask (-1 for background).

    Ids are arbitrary non-negative integers; callers renumber them.
    """
    mask_u8 = (mask != 0).astype(np.uint8)

    if max_distance <= 1.0:
        # Grid neighbours are at distance >= 1, so nothing links
        ids = np.full(mask.shape, -1, dtype=np.int64)
        ys, xs = np.nonzero(mask_u8)
        ids[ys, xs] = np.arange(ys.size)
        return ids

    connectivity = 4 if max_distance <= SQRT2 else 8
    count, components = cv2.connectedComponents(mask_u8, connectivity=connectivity)
    components = components.astype(np.int64) - 1

    if max_distance <= SQRT2 or count <= 2:
        return components

    kernel = np.ones((3, 3), dtype=np.uint8)
    interior = cv2.erode(
        mask_u8,
        kernel,
        borderType=cv2.BORDER_CONSTANT,
        borderValue=0,
    )
    boundary = (mask_u8 != 0) & (interior == 0)
    ys, xs = np.nonzero(boundary)

    sets = _UnionFind(count - 1)
    compared = _merge_linked_components(
        xs.astype(np.int64),
        ys.astype(np.int64),
        components[ys, xs],
        max_distance,
        sets,
    )
    logger.debug(
        f"Merged {count - 1} components over {xs.size} boundary points "
        f"({compared} cell pairs compared)"
    )

    roots = np.array([sets.find(i) for i in range(count - 1)], dtype=np.int64)
    clustered = np.full(mask.shape, -1, dtype=np.int64)
    foreground = components >= 0
    clustered[foreground] = roots[components[foreground]]
    return clustered


def _renumber_by_first_appearance(ids: np.ndarray) -> Tuple[int, np.ndarray]:
    """Map arbitrary ids to 0..n-1 in order of first occurrence."""
    if ids.size == 0:
        return 0, np.empty(0, dtype=np.int32)

    unique_ids, first_index, inverse = np.unique(
        ids, return_index=True, return_inverse=True
    )
    order = np.argsort(first_index, kind="stable")
    rank = np.empty(unique_ids.size, dtype=np.int32)
    rank[order] = np.arange(unique_ids.size, dtype=np.int32)
    return int(unique_ids.size), rank[inverse.reshape(-1)]


def partition_points(
    points: np.ndarray,
    max_distance: float,
    shape: Optional[Tuple[int, int]] = None,
) -> Tuple[int, np.ndarray]:
    """
    Partition integer points into single-link clusters.

    Args:
        points: (N, 2) integer (x, y) coordinates, no duplicates
        max_distance: Points closer than this are linked
        shape: Optional (H, W) covering all points; inferred otherwise

    Returns:
        Tuple of (n_labels, labels) with labels parallel to points

    Raises:
        ValueError: If max_distance is not positive or points are malformed
    """
    if max_distance <= 0:
        raise ValueError(f"max_distance must be > 0, got {max_distance}")

    points = np.asarray(points)
    if points.size == 0:
        return 0, np.empty(0, dtype=np.int32)
    if points.ndim != 2 or points.shape[1] != 2:
        raise ValueError(f"points must be (N, 2), got {points.shape}")

    coords = points.astype(np.int64)
    if not np.array_equal(coords, points):
        raise ValueError("points must have integer coordinates")

    origin = np.zeros(2, dtype=np.int64)
    if shape is None or coords.min() < 0:
        origin = coords.min(axis=0)
        span = coords.max(axis=0) - origin + 1
        shape = (int(span[1]), int(span[0]))

    xs = coords[:, 0] - origin[0]
    ys = coords[:, 1] - origin[1]

    mask = np.zeros(shape, dtype=np.uint8)
    mask[ys, xs] = 1

    ids = _cluster_image(mask, max_distance)[ys, xs]
    return _renumber_by_first_appearance(ids)


def compute_blobs(
    points: np.ndarray,
    labels: np.ndarray,
    n_labels: int,
    truncate: bool = False,
) -> List[Blob]:
    """
    Centroid and pixel count for every label.

    Args:
        points: (N, 2) (x, y) coordinates
        labels: (N,) label per point in 0..n_labels-1
        n_labels: Number of labels
        truncate: Use truncating integer division for centroids

    Returns:
        Blobs ordered by label
    """
    if n_labels == 0:
        return []

    counts = np.bincount(labels, minlength=n_labels)
    sum_x = np.bincount(labels, weights=points[:, 0], minlength=n_labels)
    sum_y = np.bincount(labels, weights=points[:, 1], minlength=n_labels)

    if truncate:
        centroid_x = sum_x.astype(np.int64) // counts
        centroid_y = sum_y.astype(np.int64) // counts
    else:
        centroid_x = sum_x / counts
        centroid_y = sum_y / counts

    return [
        Blob(
            label=label,
            centroid_x=float(centroid_x[label]),
            centroid_y=float(centroid_y[label]),
            pixel_count=int(counts[label]),
        )
        for label in range(n_labels)
    ]


@dataclass(frozen=True, slots=True)
class BlobExtraction:
    """
    Everything the extractor derived from one mask.

    Attributes:
        points: Foreground points (N, 2) as (x, y)
        labels: Label per point (N,)
        blobs: One blob per label, ordered by label
    """

    points: np.ndarray
    labels: np.ndarray
    blobs: List[Blob]

    @property
    def n_labels(self) -> int:
        return len(self.blobs)


class BlobExtractor:
    """
    Turns a motion mask into blobs.

    Attributes:
        max_distance: Linkage distance dst
        truncate_centroids: Integer-truncate centroids
    """

    def __init__(
        self,
        max_distance: float = 30.0,
        truncate_centroids: bool = False,
    ) -> None:
        """
        Initialize blob extractor.

        Args:
            max_distance: Points closer than this are linked
            truncate_centroids: Integer-truncate centroids

        Raises:
            ValueError: If max_distance is not positive
        """
        if max_distance <= 0:
            raise ValueError(f"max_distance must be > 0, got {max_distance}")

        self.max_distance = float(max_distance)
        self.truncate_centroids = truncate_centroids

        logger.info(
            f"BlobExtractor initialized: max_distance={self.max_distance}, "
            f"truncate={truncate_centroids}"
        )

    def extract(self, mask: np.ndarray) -> BlobExtraction:
        """
        Extract blobs from a mask.

        An empty mask yields an empty blob list, not an error.

        Args:
            mask: (H, W) motion mask

        Returns:
            BlobExtraction with points, labels and blobs
        """
        points = find_foreground_points(mask)
        n_labels, labels = partition_points(points, self.max_distance, shape=mask.shape)
        blobs = compute_blobs(points, labels, n_labels, truncate=self.truncate_centroids)

        logger.debug(f"Extracted {n_labels} labels from {len(points)} points")

        return BlobExtraction(points=points, labels=labels, blobs=blobs)
