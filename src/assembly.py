"""Part coordinator: orchestrates generation, validation, and STL export.

Gates STL export on the section checks (validate-before-generate), then
validates the produced mesh before writing it.
"""

import os
import tempfile
from typing import Optional

import cadquery as cq
import trimesh

from src.config import METHODS
from src.base_plate import BasePlateGenerator
from src.shell_generator import ShellGenerator
from src.profiles import polygon_area

from validation.section_validator import SectionValidator
from validation.mesh_validator import MeshValidator


class DuctAssembly:
    """Orchestrates the full generation pipeline with validation gates."""

    def __init__(self, config: dict, output_dir: str = None):
        self.config = config
        self.derived = config["derived"]
        self.output_cfg = config.get("output", {})
        if output_dir is None:
            output_dir = os.path.join(
                os.path.dirname(os.path.dirname(__file__)),
                self.output_cfg.get("directory", "output"),
            )
        self.output_dir = output_dir
        os.makedirs(self.output_dir, exist_ok=True)

        self.shell_gen = ShellGenerator(config)
        self.plate_gen = BasePlateGenerator(config)

    def section_table(self) -> list:
        """Per-section summary rows for reports."""
        rows = []
        for s in self.shell_gen.sections():
            center = self.shell_gen.path.position(s.progress)
            inner = s.inner_profile
            rows.append({
                "progress": s.progress,
                "center": tuple(float(c) for c in center),
                "twist_deg": s.twist,
                "width": float(inner[:, 0].max() - inner[:, 0].min()),
                "height": float(inner[:, 1].max() - inner[:, 1].min()),
                "area_mm2": polygon_area(inner),
            })
        return rows

    def run_analysis(self) -> dict:
        """Run pre-generation section checks (Step 1: --analyze).

        Returns dict with section table and validation status.
        """
        report = {
            "sections": self.section_table(),
            "checks": [],
            "all_passed": False,
            "failures": [],
            "derived": self.derived,
        }

        validator = SectionValidator(self.config)
        results = validator.validate_all(self.shell_gen.sections())
        report["checks"] = [
            {
                "check": r.check_name,
                "value": r.value,
                "limit": r.limit,
                "passed": r.passed,
                "detail": r.detail,
            }
            for r in results
        ]
        for r in results:
            if not r.passed:
                report["failures"].append(f"SECTION: {r.check_name}: {r.detail}")

        report["all_passed"] = validator.all_passed(results)
        return report

    def generate_mesh(self, method: Optional[str] = None) -> trimesh.Trimesh:
        """Build the part and return it as a trimesh.Trimesh.

        Args:
            method: "sweep" or "hull"; defaults to shell.method from config
        """
        method = method or self.config["shell"]["method"]
        if method not in METHODS:
            raise ValueError(f"Unknown shell method '{method}'")

        plate = self.plate_gen.generate()
        if method == "hull":
            return self.shell_gen.generate_hull(self._cq_to_trimesh(plate))

        solid = self.shell_gen.generate_sweep(plate)
        return self._cq_to_trimesh(solid)

    def generate_and_export(self, method: Optional[str] = None,
                            filepath: Optional[str] = None) -> dict:
        """Generate geometry, validate, and export STL (Step 2: --generate).

        Args:
            method: Optional shell method override
            filepath: Optional STL path. None = output dir + output.filename

        Returns:
            Dict with export path, mesh and validation result
        """
        mesh = self.generate_mesh(method)

        validator = MeshValidator(self.config)
        name = os.path.splitext(self.output_cfg.get("filename", "fan_duct.stl"))[0]
        mesh_result = validator.validate_mesh(mesh, name, check_intake_seam=True)

        if filepath is None:
            filepath = os.path.join(
                self.output_dir, self.output_cfg.get("filename", "fan_duct.stl")
            )
        parent = os.path.dirname(filepath)
        if parent:
            os.makedirs(parent, exist_ok=True)
        mesh.export(filepath)

        return {
            "exported_file": filepath,
            "mesh": mesh,
            "mesh_result": mesh_result,
            "validation_passed": mesh_result.passed,
        }

    @staticmethod
    def _cq_to_trimesh(cq_solid: cq.Workplane) -> trimesh.Trimesh:
        """Convert CadQuery solid to trimesh.Trimesh via STL export."""
        # CadQuery requires a file path for STL export
        with tempfile.NamedTemporaryFile(suffix=".stl", delete=False) as tmp:
            tmp_path = tmp.name

        try:
            cq.exporters.export(cq_solid, tmp_path, exportType="STL")
            mesh = trimesh.load(tmp_path)
            if isinstance(mesh, trimesh.Scene):
                mesh = trimesh.util.concatenate(mesh.dump())
            return mesh
        finally:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
