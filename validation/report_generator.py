"""Consolidated validation report output.

Generates human-readable text reports from analysis and validation results.
"""

import os
from datetime import datetime
from typing import List


class ReportGenerator:
    """Generates validation and section reports for the fan duct."""

    def __init__(self, config: dict, output_dir: str = None):
        self.config = config
        if output_dir is None:
            output_dir = os.path.join(
                os.path.dirname(os.path.dirname(__file__)),
                config.get("output", {}).get("directory", "output"),
            )
        self.output_dir = output_dir
        os.makedirs(self.output_dir, exist_ok=True)

    def generate_validation_report(self, analysis: dict, mesh_result=None,
                                   filepath: str = None) -> str:
        """Generate validation report text.

        Args:
            analysis: Analysis results dict from DuctAssembly.run_analysis()
            mesh_result: Optional MeshValidationResult of the generated part
            filepath: Optional output file path

        Returns:
            Report text
        """
        lines = []
        lines.append("=" * 70)
        lines.append("FAN DUCT GENERATOR — VALIDATION REPORT")
        lines.append(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        lines.append("=" * 70)
        lines.append("")

        # Overall status
        if analysis["all_passed"]:
            lines.append("OVERALL STATUS: *** PASS ***")
            lines.append("All section checks passed. Ready for geometry generation.")
        else:
            lines.append("OVERALL STATUS: *** FAIL ***")
            lines.append(f"  {len(analysis['failures'])} failure(s) found.")
            lines.append("  Geometry generation should NOT proceed until resolved.")
        lines.append("")

        # Geometry summary
        lines.append("-" * 70)
        lines.append("GEOMETRY")
        lines.append("-" * 70)
        derived = analysis.get("derived", {})
        fan = self.config["fan"]
        egress = self.config["egress"]
        lines.append(
            f"  Fan: {fan['size']:.0f}mm, intake ⌀{fan['intake_diameter']:.1f}mm, "
            f"holes ⌀{fan['hole_diameter']}mm @ {fan['hole_spacing']}mm"
        )
        lines.append(
            f"  Egress: {egress['width']:.1f}x{egress['height']:.1f}mm, "
            f"corner r={egress['corner_radius']}mm"
        )
        lines.append(f"  Path length: {derived.get('path_length', 0):.1f}mm")
        exit_c = derived.get("exit_center", (0, 0, 0))
        lines.append(f"  Exit centre: ({exit_c[0]:.1f}, {exit_c[1]:.1f}, {exit_c[2]:.1f})")
        lines.append(f"  Area ratio (egress/intake): {derived.get('area_ratio', 0):.3f}")
        lines.append("")

        # Section table
        lines.append("-" * 70)
        lines.append("SECTIONS")
        lines.append("-" * 70)
        lines.append(self.format_section_table(analysis.get("sections", [])))
        lines.append("")

        # Section checks
        lines.append("-" * 70)
        lines.append("SECTION VALIDATION")
        lines.append("-" * 70)
        for r in analysis.get("checks", []):
            status = "PASS" if r["passed"] else "FAIL"
            lines.append(f"  [{status}] {r['check']}: {r['detail']}")
        lines.append("")

        # Mesh
        if mesh_result is not None:
            lines.append("-" * 70)
            lines.append("MESH VALIDATION")
            lines.append("-" * 70)
            status = "PASS" if mesh_result.passed else "FAIL"
            bb = mesh_result.bounding_box
            lines.append(
                f"  [{status}] {mesh_result.part_name}: "
                f"{'watertight' if mesh_result.is_watertight else 'NOT watertight'}, "
                f"bodies={mesh_result.body_count}, "
                f"vol={mesh_result.volume_mm3:.0f}mm³, "
                f"bb={bb[0]:.1f}x{bb[1]:.1f}x{bb[2]:.1f}mm"
            )
            for d in mesh_result.details:
                lines.append(f"         → {d}")
            lines.append("")

        # Failures summary
        if analysis["failures"]:
            lines.append("-" * 70)
            lines.append("FAILURES — ACTION REQUIRED")
            lines.append("-" * 70)
            for f in analysis["failures"]:
                lines.append(f"  ✗ {f}")
            lines.append("")
            lines.append("SUGGESTIONS:")
            self._add_suggestions(lines, analysis)
            lines.append("")

        lines.append("")
        lines.append("=" * 70)
        lines.append("END OF REPORT")
        lines.append("=" * 70)

        report_text = "\n".join(lines)

        if filepath is None:
            filepath = os.path.join(self.output_dir, "validation_report.txt")
        with open(filepath, "w") as f:
            f.write(report_text)

        return report_text

    @staticmethod
    def format_section_table(rows: list) -> str:
        """Fixed-width table of progress, centre, twist, size and flow area."""
        lines = [
            f"  {'t':>5} {'x':>8} {'y':>8} {'z':>8} {'twist':>7} "
            f"{'width':>7} {'height':>7} {'area':>9}"
        ]
        for row in rows:
            x, y, z = row["center"]
            lines.append(
                f"  {row['progress']:5.2f} {x:8.1f} {y:8.1f} {z:8.1f} "
                f"{row['twist_deg']:7.1f} {row['width']:7.1f} {row['height']:7.1f} "
                f"{row['area_mm2']:9.0f}"
            )
        return "\n".join(lines)

    def generate_bom(self, mesh_volume_mm3: float = None, filepath: str = None) -> str:
        """Generate bill of materials."""
        fan = self.config["fan"]
        lines = []
        lines.append("=" * 50)
        lines.append("BILL OF MATERIALS")
        lines.append("=" * 50)
        lines.append("")

        lines.append("PRINTED:")
        lines.append("  Fan duct (1 piece, print base down)")
        if mesh_volume_mm3:
            lines.append(f"  Filament volume: {mesh_volume_mm3 / 1000:.1f}cm³")
        lines.append("")

        lines.append("FAN:")
        lines.append(f"  {fan['size']:.0f}mm axial fan — qty: 1")
        lines.append("")

        lines.append("FASTENERS:")
        lines.append(
            f"  M{fan['hole_diameter']:.0f} screw + nut "
            f"(⌀{fan['hole_diameter']}mm clearance) — qty: 4"
        )

        bom_text = "\n".join(lines)

        if filepath is None:
            filepath = os.path.join(self.output_dir, "bom.txt")
        with open(filepath, "w") as f:
            f.write(bom_text)

        return bom_text

    def _add_suggestions(self, lines: List[str], analysis: dict) -> None:
        """Add failure-specific suggestions to the report."""
        for failure in analysis["failures"]:
            if "bend_clearance" in failure:
                lines.append("  → Increase path.bend_radius or reduce the duct size")
                lines.append("  → Add twist so the wide side of the egress leaves the bend plane")
            elif "wall_thickness" in failure:
                lines.append("  → Increase shell.wall_thickness")
            elif "area_ratio" in failure:
                lines.append("  → Enlarge the egress or lower print.min_area_ratio")
            elif "profile_consistency" in failure:
                lines.append("  → Check egress corner radius and points_per_section")
