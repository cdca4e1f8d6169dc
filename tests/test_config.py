"""Tests for configuration loading and validation."""

import math

import pytest
import yaml
from copy import deepcopy
from src.config import load_config, validate_config, ConfigError, get_morph_config
from tests.conftest import modified_config


def _bad(default_config, section, **values):
    bad = deepcopy(default_config)
    del bad["derived"]
    bad[section].update(values)
    return bad


class TestConfigLoading:
    """Test that valid configs load correctly."""

    def test_default_config_loads(self, default_config):
        """Valid default config loads without error."""
        assert default_config is not None
        assert "fan" in default_config
        assert "derived" in default_config

    def test_config_has_all_sections(self, default_config):
        """Config contains all required top-level sections."""
        required = ["fan", "base", "egress", "shell", "path", "morph", "print", "output"]
        for section in required:
            assert section in default_config, f"Missing config section: {section}"

    def test_derived_values_present(self, default_config):
        """Derived values are computed and present."""
        derived = default_config["derived"]
        for key in ("intake_radius", "plate_top_z", "path_length",
                    "exit_center", "exit_direction", "area_ratio"):
            assert key in derived

    def test_custom_config_file(self, default_config, tmp_path):
        """A YAML file on disk is loaded, validated and derived."""
        raw = deepcopy(default_config)
        del raw["derived"]
        raw["path"]["bend_angle"] = 0.0
        path = tmp_path / "straight.yaml"
        path.write_text(yaml.safe_dump(raw))

        config = load_config(str(path))
        assert config["derived"]["bend_arc_length"] == 0.0
        assert config["derived"]["exit_center"] == pytest.approx((0.0, 0.0, 28.0))

    def test_invalid_file_raises(self, default_config, tmp_path):
        """A file violating constraints raises ConfigError on load."""
        raw = deepcopy(default_config)
        del raw["derived"]
        raw["shell"]["num_sections"] = 1
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.safe_dump(raw))
        with pytest.raises(ConfigError, match="num_sections"):
            load_config(str(path))


class TestInvalidConfigs:
    """Test that invalid configurations raise clear errors."""

    def test_intake_larger_than_fan(self, default_config):
        with pytest.raises(ConfigError, match="Intake diameter"):
            validate_config(_bad(default_config, "fan", intake_diameter=150))

    def test_holes_outside_frame(self, default_config):
        with pytest.raises(ConfigError, match="Mounting holes"):
            validate_config(_bad(default_config, "fan", hole_spacing=138))

    def test_negative_egress_width(self, default_config):
        with pytest.raises(ConfigError, match="Egress width must be positive"):
            validate_config(_bad(default_config, "egress", width=-10))

    def test_egress_corner_radius_too_large(self, default_config):
        with pytest.raises(ConfigError, match="Egress corner_radius"):
            validate_config(_bad(default_config, "egress", corner_radius=25))

    def test_morph_window_reversed(self, default_config):
        with pytest.raises(ConfigError, match="Morph window"):
            validate_config(_bad(default_config, "morph", start=0.9, end=0.5))

    def test_unknown_easing(self, default_config):
        with pytest.raises(ConfigError, match="Morph easing"):
            validate_config(_bad(default_config, "morph", easing="bounce"))

    def test_unknown_method(self, default_config):
        with pytest.raises(ConfigError, match="Shell method"):
            validate_config(_bad(default_config, "shell", method="extrude"))

    def test_too_few_points(self, default_config):
        with pytest.raises(ConfigError, match="points_per_section"):
            validate_config(_bad(default_config, "shell", points_per_section=4))

    def test_bend_radius_self_intersects(self, default_config):
        """Bend radius inside the duct half-extent folds the inner wall."""
        with pytest.raises(ConfigError, match="Bend radius"):
            validate_config(_bad(default_config, "path", bend_radius=60))

    def test_corner_reach_limits_bend(self, default_config):
        """A sharp-cornered egress reaches further than its half-width."""
        bad = _bad(default_config, "egress", width=120, height=100, corner_radius=0)
        bad["path"]["bend_radius"] = 75
        with pytest.raises(ConfigError, match="Bend radius"):
            validate_config(bad)

    def test_missing_section_reported(self, default_config):
        bad = deepcopy(default_config)
        del bad["derived"]
        del bad["morph"]
        with pytest.raises(ConfigError, match="Missing config section 'morph'"):
            validate_config(bad)

    def test_missing_keys_reported_together(self, default_config):
        bad = deepcopy(default_config)
        del bad["derived"]
        del bad["shell"]["method"]
        del bad["path"]["twist"]
        with pytest.raises(ConfigError) as exc:
            validate_config(bad)
        assert "shell.method" in str(exc.value)
        assert "path.twist" in str(exc.value)

    def test_empty_file_raises(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        with pytest.raises(ConfigError, match="empty"):
            load_config(str(path))

    def test_bend_angle_out_of_range(self, default_config):
        with pytest.raises(ConfigError, match="bend_angle"):
            validate_config(_bad(default_config, "path", bend_angle=200))

    def test_zero_length_path(self, default_config):
        bad = _bad(default_config, "path", straight_in=0, straight_out=0, bend_angle=0)
        with pytest.raises(ConfigError, match="zero length"):
            validate_config(bad)

    def test_all_errors_reported_together(self, default_config):
        """Several violations are listed in one ConfigError."""
        bad = _bad(default_config, "egress", width=-1)
        bad["morph"]["easing"] = "bounce"
        with pytest.raises(ConfigError) as exc:
            validate_config(bad)
        assert "Egress width" in str(exc.value)
        assert "Morph easing" in str(exc.value)


class TestDerivedValues:
    """Test that derived values are computed correctly."""

    def test_intake_radius(self, default_config):
        assert default_config["derived"]["intake_radius"] == pytest.approx(67.0)

    def test_path_length(self, default_config):
        """10mm rise + quarter arc at 90mm + 15mm run."""
        expected = 10.0 + math.pi / 2 * 90.0 + 15.0
        assert default_config["derived"]["path_length"] == pytest.approx(expected)

    def test_exit_center(self, default_config):
        """Quarter bend toward +X: exit at (R + run, 0, plate + rise + R)."""
        assert default_config["derived"]["exit_center"] == pytest.approx((105.0, 0.0, 103.0))
        assert default_config["derived"]["exit_direction"] == pytest.approx((1.0, 0.0, 0.0))

    def test_flow_areas(self, default_config):
        d = default_config["derived"]
        assert d["intake_area"] == pytest.approx(math.pi * 67.0**2)
        assert d["egress_area"] == pytest.approx(120 * 40 - (4 - math.pi) * 64)
        assert d["area_ratio"] == pytest.approx(d["egress_area"] / d["intake_area"])

    def test_outer_half_extent(self, default_config):
        """Intake circle plus wall dominates the default 120x40 egress corner."""
        assert default_config["derived"]["max_outer_half_extent"] == pytest.approx(69.0)
        squarish = modified_config(default_config, "egress", width=120, height=100, corner_radius=0)
        assert squarish["derived"]["max_outer_half_extent"] == pytest.approx(math.hypot(60, 50) + 2.0)

    def test_morph_config(self, default_config):
        m = get_morph_config(default_config)
        assert m["intake_radius"] == pytest.approx(67.0)
        assert m["n_points"] == default_config["shell"]["points_per_section"]
