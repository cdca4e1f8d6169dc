"""Tests for the fan-mount base plate."""

import math

import pytest
from src.base_plate import BasePlateGenerator
from src.utils import square_hole_points


class TestHolePattern:
    """Test mounting hole placement."""

    def test_four_holes(self):
        assert len(square_hole_points(124.5)) == 4

    def test_holes_on_square(self):
        for x, y in square_hole_points(124.5):
            assert abs(x) == pytest.approx(62.25)
            assert abs(y) == pytest.approx(62.25)

    def test_holes_clear_intake(self, default_config):
        """Hole edges sit outside the duct's outer wall at the plate."""
        r_outer = default_config["derived"]["intake_radius"] + default_config["shell"]["wall_thickness"]
        hole_r = default_config["fan"]["hole_diameter"] / 2
        for x, y in BasePlateGenerator(default_config).hole_positions():
            assert math.hypot(x, y) - hole_r > r_outer


class TestPlateSolid:
    """Test the CadQuery plate."""

    @pytest.fixture(scope="class")
    def plate(self, default_config):
        try:
            return BasePlateGenerator(default_config).generate()
        except Exception:
            pytest.skip("CadQuery not available")

    def test_bounding_box(self, plate):
        bb = plate.val().BoundingBox()
        assert bb.xlen == pytest.approx(140.0, abs=1e-3)
        assert bb.ylen == pytest.approx(140.0, abs=1e-3)
        assert bb.zmin == pytest.approx(0.0, abs=1e-3)
        assert bb.zmax == pytest.approx(3.0, abs=1e-3)

    def test_volume(self, plate):
        """Full square minus filleted corners minus four M4 holes."""
        t = 3.0
        expected = (
            140.0**2 * t
            - (4 - math.pi) * 6.0**2 * t
            - 4 * math.pi * (4.3 / 2) ** 2 * t
        )
        assert plate.val().Volume() == pytest.approx(expected, rel=1e-4)
