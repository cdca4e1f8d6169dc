"""Duct centreline: straight rise, circular bend, straight run.

The path lives in the XZ plane. It starts on the plate top at the origin
heading +Z, bends toward +X about an axis parallel to Y, and leaves along
the tangent at the end of the bend. Cross-sections are placed on the plane
spanned by the normal N (in the bend plane) and the binormal B (= +Y),
rotated by the twist angle about the tangent T. (N, B, T) is right-handed,
so a counter-clockwise profile faces along the flow.
"""

import math
from typing import Tuple

import numpy as np

from src.profiles import ease
from src.utils import rotate_2d


class DuctPath:
    """Arc-length parametrised centreline with a twisting section frame."""

    def __init__(self, config: dict):
        path_cfg = config["path"]
        self.z0 = config["derived"]["plate_top_z"]
        self.straight_in = path_cfg["straight_in"]
        self.straight_out = path_cfg["straight_out"]
        self.bend_angle = math.radians(path_cfg["bend_angle"])
        self.bend_radius = path_cfg["bend_radius"]
        self.twist_deg = path_cfg["twist"]
        self.easing = config["morph"]["easing"]

        self.bend_length = self.bend_angle * self.bend_radius
        self.length = self.straight_in + self.bend_length + self.straight_out

    def arc_length(self, progress: float) -> float:
        """Arc length at a progress value (linear, may fall outside [0, L])."""
        return progress * self.length

    def _bend_phi(self, s: float) -> float:
        """Angle turned through the bend at arc length s."""
        if self.bend_length <= 0:
            return 0.0
        along = min(max(s - self.straight_in, 0.0), self.bend_length)
        return along / self.bend_radius

    def in_bend(self, progress: float) -> bool:
        s = self.arc_length(progress)
        return self.bend_length > 0 and self.straight_in <= s <= self.straight_in + self.bend_length

    def position(self, progress: float) -> np.ndarray:
        """Centreline point. Progress outside [0, 1] extends the end tangents."""
        s = self.arc_length(progress)
        if s <= self.straight_in:
            return np.array([0.0, 0.0, self.z0 + s])

        phi = self._bend_phi(s)
        r = self.bend_radius
        point = np.array([
            r - r * math.cos(phi),
            0.0,
            self.z0 + self.straight_in + r * math.sin(phi),
        ])
        beyond = s - self.straight_in - self.bend_length
        if beyond > 0:
            point = point + beyond * self.tangent(progress)
        return point

    def tangent(self, progress: float) -> np.ndarray:
        phi = self._bend_phi(self.arc_length(progress))
        return np.array([math.sin(phi), 0.0, math.cos(phi)])

    def normal(self, progress: float) -> np.ndarray:
        """In-plane normal, +X at progress 0.

        Inside the bend the bend centre lies at position + bend_radius * normal,
        so +N is the inside of the bend.
        """
        phi = self._bend_phi(self.arc_length(progress))
        return np.array([math.cos(phi), 0.0, -math.sin(phi)])

    def binormal(self, progress: float) -> np.ndarray:
        return np.array([0.0, 1.0, 0.0])

    def frame(self, progress: float) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """(normal, binormal, tangent) at a progress value."""
        return self.normal(progress), self.binormal(progress), self.tangent(progress)

    def twist(self, progress: float) -> float:
        """Section rotation about the tangent, degrees."""
        return self.twist_deg * ease(progress, self.easing)

    def place(self, profile: np.ndarray, progress: float) -> np.ndarray:
        """Map a 2D (N, 2) profile onto the section plane at progress.

        Returns:
            (N, 3) array of world coordinates
        """
        rotated = rotate_2d(profile, self.twist(progress))
        n, b, _ = self.frame(progress)
        center = self.position(progress)
        return center[None, :] + rotated[:, 0:1] * n[None, :] + rotated[:, 1:2] * b[None, :]

    def progress_at(self, s: float) -> float:
        """Progress value for an arc length (inverse of arc_length)."""
        return s / self.length
