"""Duct shell generation: morphing cross-sections joined along the path.

Two ways of turning the section sequence into a solid are supported:

  - sweep (default): ruled CadQuery lofts through the outer-wall sections and
    through the airflow sections; the outer loft is unioned with the base
    plate and the airflow loft is cut from the result. The airflow loft
    starts below the plate and ends past the exit, so it opens the intake
    hole and the egress in the same cut and leaves no seam at the intake.

  - hull: the older chained-hull construction. Each consecutive pair of
    sections is wrapped in its convex hull (scipy), the hulls are unioned
    with trimesh, and the airflow hull chain is subtracted. Kept for
    comparison with older prints; the straight hull walls facet the bend.
"""

from dataclasses import dataclass
from typing import List

import numpy as np
import cadquery as cq
import trimesh
from scipy.spatial import ConvexHull

from src.config import get_morph_config
from src.duct_path import DuctPath
from src.profiles import morph_profile
from src.utils import dedup_points


@dataclass
class Section:
    """One cross-section of the duct, in 2D and placed in 3D."""
    progress: float
    twist: float                 # degrees
    inner_profile: np.ndarray    # (N, 2) airflow boundary
    outer_profile: np.ndarray    # (N, 2) outside of the wall
    inner: np.ndarray            # (N, 3) world coordinates
    outer: np.ndarray            # (N, 3) world coordinates


class ShellGenerator:
    """Builds the duct shell from morphing sections placed along DuctPath."""

    # Airflow solid overshoots the exit by this much for a clean cut
    EXIT_OVERSHOOT = 1.0  # mm
    # and reaches this far below the plate bottom
    INTAKE_OVERSHOOT = 1.0  # mm
    BOOLEAN_ENGINE = "manifold"

    def __init__(self, config: dict):
        self.config = config
        self.shell_cfg = config["shell"]
        self.wall_t = self.shell_cfg["wall_thickness"]
        self.n_sections = self.shell_cfg["num_sections"]
        self.overlap = self.shell_cfg.get("overlap", 0.5)
        self.plate_t = config["base"]["thickness"]
        self.morph_cfg = get_morph_config(config)
        self.path = DuctPath(config)

    # ------------------------------------------------------------------
    # Sections
    # ------------------------------------------------------------------

    def section_at(self, progress: float) -> Section:
        inner_2d = morph_profile(progress, self.morph_cfg)
        outer_2d = morph_profile(progress, self.morph_cfg, offset=self.wall_t)
        return Section(
            progress=progress,
            twist=self.path.twist(progress),
            inner_profile=inner_2d,
            outer_profile=outer_2d,
            inner=self.path.place(inner_2d, progress),
            outer=self.path.place(outer_2d, progress),
        )

    def progress_values(self) -> np.ndarray:
        return np.linspace(0.0, 1.0, self.n_sections)

    def sections(self) -> List[Section]:
        """Evenly spaced sections from intake (progress 0) to egress (1)."""
        return [self.section_at(float(p)) for p in self.progress_values()]

    def outer_sections(self) -> List[np.ndarray]:
        """Outer wall rings, the first one sunk into the plate by `overlap`."""
        rings = [s.outer for s in self.sections()]
        if self.overlap > 0:
            sunk = self.section_at(self.path.progress_at(-self.overlap))
            rings.insert(0, sunk.outer)
        return rings

    def airflow_sections(self) -> List[np.ndarray]:
        """Airflow rings, extended through the plate and past the exit."""
        below = self.path.progress_at(-(self.plate_t + self.INTAKE_OVERSHOOT))
        past = 1.0 + self.path.progress_at(self.EXIT_OVERSHOOT)
        rings = [self.section_at(below).inner]
        rings.extend(s.inner for s in self.sections())
        rings.append(self.section_at(past).inner)
        return rings

    # ------------------------------------------------------------------
    # Path sweep (CadQuery)
    # ------------------------------------------------------------------

    @staticmethod
    def _ring_wire(ring: np.ndarray) -> cq.Wire:
        pts = dedup_points([tuple(float(c) for c in p) for p in ring])
        return cq.Wire.makePolygon([cq.Vector(*p) for p in pts], close=True)

    def _loft(self, rings: List[np.ndarray]) -> cq.Workplane:
        """Ruled loft through a list of (N, 3) rings."""
        wires = [self._ring_wire(r) for r in rings]
        solid = cq.Solid.makeLoft(wires, True)
        return cq.Workplane("XY").add(solid)

    def generate_sweep(self, base_plate: cq.Workplane) -> cq.Workplane:
        """Plate + outer wall loft, minus the airflow loft."""
        outer = self._loft(self.outer_sections())
        airflow = self._loft(self.airflow_sections())
        return base_plate.union(outer).cut(airflow)

    # ------------------------------------------------------------------
    # Chained hull (scipy + trimesh)
    # ------------------------------------------------------------------

    @staticmethod
    def hull_chain(rings: List[np.ndarray]) -> List[trimesh.Trimesh]:
        """Convex hull of every consecutive pair of rings."""
        hulls = []
        for ring_a, ring_b in zip(rings[:-1], rings[1:]):
            points = np.vstack([ring_a, ring_b])
            hull = ConvexHull(points)
            mesh = trimesh.Trimesh(vertices=points, faces=hull.simplices)
            mesh.remove_unreferenced_vertices()
            mesh.fix_normals()
            hulls.append(mesh)
        return hulls

    def generate_hull(self, base_mesh: trimesh.Trimesh) -> trimesh.Trimesh:
        """Plate mesh + outer hull chain, minus the airflow hull chain."""
        outer_hulls = self.hull_chain(self.outer_sections())
        airflow_hulls = self.hull_chain(self.airflow_sections())

        body = trimesh.boolean.union([base_mesh] + outer_hulls, engine=self.BOOLEAN_ENGINE)
        airflow = trimesh.boolean.union(airflow_hulls, engine=self.BOOLEAN_ENGINE)
        return trimesh.boolean.difference([body, airflow], engine=self.BOOLEAN_ENGINE)
