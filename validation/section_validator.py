"""Cross-section validation: bend clearance, printable wall, flow area, profile shape.

Runs on the section sequence before any solid is built, so bad parameter sets
are rejected before the geometry kernel gets to produce a broken mesh.
"""

from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from src.config import get_morph_config
from src.duct_path import DuctPath
from src.profiles import morph_profile, polygon_area
from src.utils import polygon_distance


@dataclass
class SectionCheckResult:
    """Result of a section validation check."""
    check_name: str
    value: float
    limit: float
    passed: bool
    detail: str = ""


class SectionValidator:
    """Validates the morphing section sequence for printability."""

    # Sections sampled along the bend for the clearance check
    BEND_SAMPLES = 32

    def __init__(self, config: dict):
        self.config = config
        self.print_cfg = config["print"]
        self.path = DuctPath(config)
        self.morph_cfg = get_morph_config(config)
        self.wall_t = config["shell"]["wall_thickness"]
        self._results: Optional[List[SectionCheckResult]] = None

    def validate_all(self, sections: list) -> List[SectionCheckResult]:
        """Run all section validations.

        Args:
            sections: List of shell_generator.Section, intake first
        """
        results = [
            self.check_profile_consistency(sections),
            self.check_bend_clearance(sections),
            self.check_wall_thickness(sections),
            self.check_area_ratio(sections),
        ]
        self._results = results
        return results

    def check_profile_consistency(self, sections: list) -> SectionCheckResult:
        """Every section has the same point count and a positive (CCW) area."""
        counts = {len(s.inner_profile) for s in sections} | {len(s.outer_profile) for s in sections}
        min_area = min(
            min(polygon_area(s.inner_profile), polygon_area(s.outer_profile))
            for s in sections
        )
        passed = len(counts) == 1 and min_area > 0
        return SectionCheckResult(
            check_name="profile_consistency",
            value=min_area,
            limit=0.0,
            passed=passed,
            detail=f"Point counts {sorted(counts)}, smallest area {min_area:.1f}mm²",
        )

    def check_bend_clearance(self, sections: list) -> SectionCheckResult:
        """Outer wall must stay short of the bend centre on the inside of the bend.

        The bend is sampled on its own grid as well as at the given sections,
        so a coarse section count cannot step over it.
        """
        radius = self.path.bend_radius
        if self.path.bend_length <= 0:
            return SectionCheckResult(
                check_name="bend_clearance",
                value=0.0,
                limit=radius,
                passed=True,
                detail="Straight duct, no bend",
            )

        bend_start = self.path.progress_at(self.path.straight_in)
        bend_end = self.path.progress_at(self.path.straight_in + self.path.bend_length)
        samples = []
        for p in np.linspace(bend_start, bend_end, self.BEND_SAMPLES):
            outer_2d = morph_profile(float(p), self.morph_cfg, offset=self.wall_t)
            samples.append((float(p), self.path.place(outer_2d, float(p))))
        samples.extend((s.progress, s.outer) for s in sections if self.path.in_bend(s.progress))

        reach = 0.0
        for progress, outer in samples:
            center = self.path.position(progress)
            normal = self.path.normal(progress)
            reach = max(reach, float(np.max((outer - center) @ normal)))

        return SectionCheckResult(
            check_name="bend_clearance",
            value=reach,
            limit=radius,
            passed=reach < radius,
            detail=f"Inside-of-bend reach {reach:.1f}mm (bend radius {radius:.1f}mm)",
        )

    def check_wall_thickness(self, sections: list) -> SectionCheckResult:
        """Thinnest wall across all sections must be printable."""
        min_wall = self.print_cfg["min_wall_thickness"]
        thinnest = min(
            float(polygon_distance(s.outer_profile, s.inner_profile).min())
            for s in sections
        )
        return SectionCheckResult(
            check_name="wall_thickness",
            value=thinnest,
            limit=min_wall,
            passed=thinnest >= min_wall,
            detail=f"Thinnest wall {thinnest:.2f}mm (minimum {min_wall}mm)",
        )

    def check_area_ratio(self, sections: list) -> SectionCheckResult:
        """Egress flow area relative to the intake must not choke the fan."""
        min_ratio = self.print_cfg.get("min_area_ratio", 0.0)
        intake = polygon_area(sections[0].inner_profile)
        egress = polygon_area(sections[-1].inner_profile)
        ratio = egress / intake
        return SectionCheckResult(
            check_name="area_ratio",
            value=ratio,
            limit=min_ratio,
            passed=ratio >= min_ratio,
            detail=(
                f"Egress/intake area {egress:.0f}/{intake:.0f}mm² = {ratio:.3f} "
                f"(minimum {min_ratio})"
            ),
        )

    def all_passed(self, results: Optional[List[SectionCheckResult]] = None) -> bool:
        if results is None:
            results = self._results or []
        return all(r.passed for r in results)
