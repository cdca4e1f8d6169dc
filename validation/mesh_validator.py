"""STL mesh quality validation using trimesh.

Checks that generated STL files are watertight, manifold, a single body,
have no degenerate faces, and fit the build volume. For the duct itself it
also slices the mesh just above the plate to confirm the shell meets the
plate without a gap (exactly one outer and one inner wall loop).
"""

from dataclasses import dataclass
from typing import List

import numpy as np
import trimesh


@dataclass
class MeshValidationResult:
    """Result of mesh quality validation for a single part."""
    part_name: str
    is_watertight: bool
    is_volume: bool
    has_degenerate_faces: bool
    num_degenerate: int
    body_count: int
    volume_mm3: float
    bounding_box: tuple  # (x, y, z) dimensions in mm
    fits_build_volume: bool
    seam_loops: int      # -1 when the intake seam check was not run
    passed: bool
    details: List[str]


class MeshValidator:
    """Validates STL mesh quality for 3D printing."""

    # Height above the plate top at which the intake seam is sliced
    SEAM_SLICE_OFFSET = 0.5  # mm
    SEAM_EXPECTED_LOOPS = 2  # outer wall + airflow bore

    def __init__(self, config: dict):
        self.config = config
        self.print_cfg = config["print"]
        self.max_build = (
            self.print_cfg["max_build_x"],
            self.print_cfg["max_build_y"],
            self.print_cfg["max_build_z"],
        )
        self.min_wall = self.print_cfg["min_wall_thickness"]
        self.plate_top_z = config["base"]["thickness"]

    def validate_mesh(self, mesh: trimesh.Trimesh, part_name: str,
                      check_intake_seam: bool = False) -> MeshValidationResult:
        """Validate a single mesh for print quality.

        Args:
            mesh: trimesh.Trimesh object
            part_name: Name identifier for the part
            check_intake_seam: Also slice above the plate and count wall loops

        Returns:
            MeshValidationResult
        """
        details = []

        # Watertight check
        is_watertight = mesh.is_watertight
        if not is_watertight:
            details.append("Mesh is NOT watertight — has open edges")

        # Valid volume check
        is_volume = mesh.is_volume
        if not is_volume:
            details.append("Mesh is NOT a valid volume — inconsistent winding or open edges")

        # Degenerate face check
        areas = mesh.area_faces
        degenerate_mask = areas < 1e-10  # nearly zero-area triangles
        num_degenerate = int(np.sum(degenerate_mask))
        has_degenerate = num_degenerate > 0
        if has_degenerate:
            details.append(f"Found {num_degenerate} degenerate (zero-area) faces")

        # Separate shells mean something failed to fuse
        body_count = int(mesh.body_count)
        if body_count != 1:
            details.append(f"Mesh has {body_count} separate bodies (expected 1)")

        # Volume
        volume = mesh.volume if is_volume else 0

        # Bounding box
        bb = mesh.bounding_box.extents  # (x, y, z) dimensions
        bb_tuple = tuple(float(d) for d in bb)

        # Build volume check
        fits = all(bb[i] <= self.max_build[i] for i in range(3))
        if not fits:
            details.append(
                f"Part exceeds build volume: {bb[0]:.1f}x{bb[1]:.1f}x{bb[2]:.1f}mm "
                f"> {self.max_build[0]}x{self.max_build[1]}x{self.max_build[2]}mm"
            )

        seam_loops = -1
        seam_ok = True
        if check_intake_seam:
            seam_loops = self.count_seam_loops(mesh)
            seam_ok = seam_loops == self.SEAM_EXPECTED_LOOPS
            if not seam_ok:
                details.append(
                    f"Intake seam slice found {seam_loops} wall loop(s), "
                    f"expected {self.SEAM_EXPECTED_LOOPS}; gap at the plate/shell boundary"
                )

        passed = (
            is_watertight and is_volume and not has_degenerate
            and body_count == 1 and fits and seam_ok
        )

        if passed:
            details.append("All mesh quality checks passed")

        return MeshValidationResult(
            part_name=part_name,
            is_watertight=is_watertight,
            is_volume=is_volume,
            has_degenerate_faces=has_degenerate,
            num_degenerate=num_degenerate,
            body_count=body_count,
            volume_mm3=volume,
            bounding_box=bb_tuple,
            fits_build_volume=fits,
            seam_loops=seam_loops,
            passed=passed,
            details=details,
        )

    def count_seam_loops(self, mesh: trimesh.Trimesh) -> int:
        """Number of closed loops in a horizontal slice just above the plate."""
        z = self.plate_top_z + self.SEAM_SLICE_OFFSET
        section = mesh.section(plane_origin=[0, 0, z], plane_normal=[0, 0, 1])
        if section is None:
            return 0
        return len(section.discrete)

    def validate_stl_file(self, filepath: str, part_name: str,
                          check_intake_seam: bool = False) -> MeshValidationResult:
        """Validate an STL file from disk."""
        mesh = trimesh.load(filepath)
        if isinstance(mesh, trimesh.Scene):
            # Multi-body: merge
            mesh = trimesh.util.concatenate(mesh.dump())
        return self.validate_mesh(mesh, part_name, check_intake_seam)
