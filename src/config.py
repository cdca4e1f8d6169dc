"""Configuration loading, validation, and derived value computation."""

import os
import math

import yaml


# Default config path
DEFAULT_CONFIG_PATH = os.path.join(
    os.path.dirname(os.path.dirname(__file__)), "config", "default.yaml"
)

EASINGS = ("linear", "smoothstep", "cosine")
METHODS = ("sweep", "hull")

# Keys the generators read directly, per config section
REQUIRED_KEYS = {
    "fan": ["size", "hole_spacing", "hole_diameter", "intake_diameter"],
    "base": ["thickness"],
    "egress": ["width", "height", "corner_radius"],
    "shell": ["wall_thickness", "num_sections", "points_per_section", "method"],
    "path": ["straight_in", "bend_angle", "bend_radius", "straight_out", "twist"],
    "morph": ["start", "end", "easing"],
    "print": ["max_build_x", "max_build_y", "max_build_z", "min_wall_thickness"],
}


class ConfigError(Exception):
    """Raised when configuration validation fails."""
    pass


def load_config(path: str = None) -> dict:
    """Load configuration from YAML file, validate, and compute derived values."""
    if path is None:
        path = DEFAULT_CONFIG_PATH

    with open(path, "r") as f:
        config = yaml.safe_load(f)

    validate_config(config)
    compute_derived(config)
    return config


def _positive(errors: list, section: dict, section_name: str, keys: list) -> None:
    for key in keys:
        value = section.get(key, 0)
        if value is None or value <= 0:
            errors.append(f"{section_name} {key} must be positive, got {value}")


def outer_half_extent(intake_r: float, width: float, height: float,
                      corner_radius: float, wall_t: float) -> float:
    """Largest distance of the outer wall from the centreline, any section.

    The rounded rectangle reaches furthest at its corner arcs, and the twist
    can turn that diagonal into the bend plane. Blended sections lie between
    the two end profiles ray by ray, so the ends bound every section.
    """
    corner_reach = math.hypot(width / 2 - corner_radius, height / 2 - corner_radius) + corner_radius
    return max(intake_r, corner_reach) + wall_t


def missing_keys(config: dict) -> list:
    """List required sections and keys absent from the config."""
    missing = []
    for section, keys in REQUIRED_KEYS.items():
        values = config.get(section)
        if not isinstance(values, dict):
            missing.append(f"Missing config section '{section}'")
            continue
        for key in keys:
            if key not in values:
                missing.append(f"Missing config key '{section}.{key}'")
    return missing


def validate_config(config: dict) -> None:
    """Validate configuration constraints. Raises ConfigError on failure."""
    if not isinstance(config, dict):
        raise ConfigError("Configuration validation failed:\n  - Config file is empty or not a mapping")
    missing = missing_keys(config)
    if missing:
        raise ConfigError("Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in missing))

    errors = []

    fan = config.get("fan", {})
    base = config.get("base", {})
    egress = config.get("egress", {})
    shell = config.get("shell", {})
    path = config.get("path", {})
    morph = config.get("morph", {})

    # --- Positive dimensions ---
    _positive(errors, fan, "Fan", ["size", "hole_spacing", "hole_diameter", "intake_diameter"])
    _positive(errors, base, "Base", ["thickness"])
    _positive(errors, egress, "Egress", ["width", "height"])
    _positive(errors, shell, "Shell", ["wall_thickness"])
    _positive(errors, path, "Path", ["bend_radius"])

    # --- Fan frame fits its openings ---
    fan_size = fan.get("size", 0)
    if fan.get("intake_diameter", 0) >= fan_size:
        errors.append(
            f"Intake diameter ({fan.get('intake_diameter')}) must be smaller "
            f"than fan size ({fan_size})"
        )
    hole_extent = fan.get("hole_spacing", 0) + fan.get("hole_diameter", 0)
    if hole_extent >= fan_size:
        errors.append(
            f"Mounting holes ({hole_extent:.1f}mm across) do not fit "
            f"inside the {fan_size}mm fan frame"
        )

    # --- Corner radii ---
    width = egress.get("width", 0)
    height = egress.get("height", 0)
    egress_rc = egress.get("corner_radius", 0)
    if egress_rc < 0 or egress_rc > min(width, height) / 2:
        errors.append(
            f"Egress corner_radius ({egress_rc}) must be within "
            f"[0, {min(width, height) / 2}]"
        )
    base_rc = base.get("corner_radius", 0)
    if base_rc < 0 or (fan_size > 0 and base_rc >= fan_size / 2):
        errors.append(
            f"Base corner_radius ({base_rc}) must be within [0, {fan_size / 2})"
        )

    # --- Morph window and easing ---
    start = morph.get("start", 0.0)
    end = morph.get("end", 1.0)
    if not (0.0 <= start < end <= 1.0):
        errors.append(
            f"Morph window must satisfy 0 <= start < end <= 1, got start={start}, end={end}"
        )
    if morph.get("easing", "linear") not in EASINGS:
        errors.append(
            f"Morph easing '{morph.get('easing')}' must be one of {', '.join(EASINGS)}"
        )

    # --- Discretisation ---
    if shell.get("method", "sweep") not in METHODS:
        errors.append(
            f"Shell method '{shell.get('method')}' must be one of {', '.join(METHODS)}"
        )
    if shell.get("num_sections", 0) < 2:
        errors.append(f"Shell num_sections must be at least 2, got {shell.get('num_sections')}")
    if shell.get("points_per_section", 0) < 8:
        errors.append(
            f"Shell points_per_section must be at least 8, got {shell.get('points_per_section')}"
        )
    if shell.get("overlap", 0) < 0:
        errors.append(f"Shell overlap must be non-negative, got {shell.get('overlap')}")
    if shell.get("overlap", 0) >= base.get("thickness", 0) > 0:
        errors.append(
            f"Shell overlap ({shell.get('overlap')}) must be less than "
            f"base thickness ({base.get('thickness')})"
        )

    # --- Path ---
    bend_angle = path.get("bend_angle", 0)
    if bend_angle < 0 or bend_angle > 180:
        errors.append(f"Path bend_angle must be within [0, 180], got {bend_angle}")
    for key in ("straight_in", "straight_out"):
        if path.get(key, 0) < 0:
            errors.append(f"Path {key} must be non-negative, got {path.get(key)}")
    path_length = (
        path.get("straight_in", 0) + path.get("straight_out", 0)
        + math.radians(max(bend_angle, 0)) * max(path.get("bend_radius", 0), 0)
    )
    if path_length <= 0:
        errors.append("Path has zero length: add a straight run or a bend")

    # --- Inside of the bend must not fold over itself ---
    if bend_angle > 0 and path.get("bend_radius", 0) > 0:
        half_extent = outer_half_extent(
            fan.get("intake_diameter", 0) / 2, width, height, egress_rc,
            shell.get("wall_thickness", 0),
        )
        if half_extent >= path["bend_radius"]:
            errors.append(
                f"Bend radius ({path['bend_radius']}) must exceed the duct's outer "
                f"half-extent ({half_extent:.1f}) or the inner bend self-intersects"
            )

    # --- Print settings ---
    print_cfg = config.get("print", {})
    for key in ("max_build_x", "max_build_y", "max_build_z", "min_wall_thickness"):
        if print_cfg.get(key, 0) <= 0:
            errors.append(f"Print {key} must be positive, got {print_cfg.get(key)}")
    if fan_size > min(print_cfg.get("max_build_x", 0), print_cfg.get("max_build_y", 0)):
        errors.append(
            f"Base plate ({fan_size}mm) exceeds build volume "
            f"({print_cfg.get('max_build_x')}x{print_cfg.get('max_build_y')}mm)"
        )

    if errors:
        raise ConfigError("Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors))


def compute_derived(config: dict) -> None:
    """Compute derived values and add them to the config dict."""
    derived = {}

    fan = config["fan"]
    egress = config["egress"]
    path = config["path"]
    wall_t = config["shell"]["wall_thickness"]

    # --- Openings ---
    intake_r = fan["intake_diameter"] / 2
    derived["intake_radius"] = intake_r
    derived["plate_top_z"] = config["base"]["thickness"]

    derived["intake_area"] = math.pi * intake_r**2
    rc = egress["corner_radius"]
    derived["egress_area"] = egress["width"] * egress["height"] - (4 - math.pi) * rc**2
    derived["area_ratio"] = derived["egress_area"] / derived["intake_area"]

    derived["max_outer_half_extent"] = outer_half_extent(
        intake_r, egress["width"], egress["height"], rc, wall_t
    )

    # --- Centreline ---
    theta = math.radians(path["bend_angle"])
    radius = path["bend_radius"]
    bend_arc = theta * radius
    derived["bend_arc_length"] = bend_arc
    derived["path_length"] = path["straight_in"] + bend_arc + path["straight_out"]

    z0 = derived["plate_top_z"] + path["straight_in"]
    direction = (math.sin(theta), 0.0, math.cos(theta))
    bend_end = (radius - radius * math.cos(theta), 0.0, z0 + radius * math.sin(theta))
    derived["exit_direction"] = direction
    derived["exit_center"] = tuple(
        bend_end[i] + path["straight_out"] * direction[i] for i in range(3)
    )

    config["derived"] = derived


def get_morph_config(config: dict) -> dict:
    """Collect everything needed to build a cross-section at any progress.

    Args:
        config: Full configuration dict

    Returns:
        Dict with intake radius, egress rectangle, morph window and point count
    """
    return {
        "intake_radius": config["fan"]["intake_diameter"] / 2,
        "egress_width": config["egress"]["width"],
        "egress_height": config["egress"]["height"],
        "egress_corner_radius": config["egress"]["corner_radius"],
        "start": config["morph"]["start"],
        "end": config["morph"]["end"],
        "easing": config["morph"]["easing"],
        "n_points": config["shell"]["points_per_section"],
    }
