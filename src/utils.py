"""Shared geometry helpers for CAD generation."""

import math
import numpy as np
from typing import List, Tuple


def square_hole_points(spacing: float) -> List[Tuple[float, float]]:
    """Generate fan mounting hole positions on a square pattern.

    Args:
        spacing: Centre-to-centre hole distance along each side in mm

    Returns:
        List of (x, y) center positions, counter-clockwise from (+, +)
    """
    h = spacing / 2
    return [(h, h), (-h, h), (-h, -h), (h, -h)]


def rotate_2d(points: np.ndarray, angle_deg: float) -> np.ndarray:
    """Rotate (N, 2) points about the origin by angle_deg (counter-clockwise)."""
    a = math.radians(angle_deg)
    cos_a = math.cos(a)
    sin_a = math.sin(a)
    return np.column_stack([
        points[:, 0] * cos_a - points[:, 1] * sin_a,
        points[:, 0] * sin_a + points[:, 1] * cos_a,
    ])


def polygon_distance(points: np.ndarray, polygon: np.ndarray) -> np.ndarray:
    """Distance from each point to the closest edge of a closed polygon.

    Args:
        points: (M, 2) query points
        polygon: (N, 2) polygon vertices, closing edge implied

    Returns:
        (M,) array of distances
    """
    a = polygon
    b = np.roll(polygon, -1, axis=0)
    ab = b - a                                   # (N, 2)
    ap = points[:, None, :] - a[None, :, :]      # (M, N, 2)
    denom = np.maximum(np.sum(ab * ab, axis=1), 1e-12)
    t = np.clip(np.sum(ap * ab[None, :, :], axis=2) / denom, 0.0, 1.0)
    closest = a[None, :, :] + t[:, :, None] * ab[None, :, :]
    dist = np.linalg.norm(points[:, None, :] - closest, axis=2)
    return dist.min(axis=1)


def dedup_points(points, tol=1e-4):
    """Remove consecutive duplicate points within tolerance (works in 2D or 3D)."""
    if not points:
        return points
    result = [points[0]]
    for pt in points[1:]:
        d2 = sum((pt[i] - result[-1][i]) ** 2 for i in range(len(pt)))
        if d2 > tol * tol:
            result.append(pt)
    # Remove last if same as first (the polygon closes itself)
    if len(result) > 2:
        d2 = sum((result[-1][i] - result[0][i]) ** 2 for i in range(len(result[0])))
        if d2 <= tol * tol:
            result = result[:-1]
    return result
