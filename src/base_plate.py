"""Fan-mount base plate generation using CadQuery.

Square plate matching the fan frame, with filleted vertical corners and four
mounting holes. The intake opening is not cut here: the shell's airflow solid
punches it so the plate hole and the duct bore are one continuous surface.
"""

import cadquery as cq

from src.utils import square_hole_points


class BasePlateGenerator:
    """Generates the square fan mounting plate."""

    def __init__(self, config: dict):
        self.fan_cfg = config["fan"]
        self.base_cfg = config["base"]

        self.size = self.fan_cfg["size"]
        self.thickness = self.base_cfg["thickness"]
        self.corner_r = self.base_cfg.get("corner_radius", 0)

    def generate(self) -> cq.Workplane:
        """Plate spanning z = 0 .. thickness, centred on the Z axis."""
        plate = (
            cq.Workplane("XY")
            .rect(self.size, self.size)
            .extrude(self.thickness)
        )

        if self.corner_r > 0:
            plate = plate.edges("|Z").fillet(self.corner_r)

        plate = (
            plate.faces(">Z")
            .workplane()
            .pushPoints(self.hole_positions())
            .hole(self.fan_cfg["hole_diameter"])
        )

        return plate

    def hole_positions(self) -> list:
        return square_hole_points(self.fan_cfg["hole_spacing"])
