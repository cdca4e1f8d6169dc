"""Duct cross-section generation and circle-to-rectangle morphing.

Every profile is an open (N, 2) polygon, counter-clockwise, sampled on the
same N rays from the centre (angle 2*pi*k/N). Because point k of the intake
circle and point k of the egress rectangle lie on the same ray, the two can
be blended point-by-point into a smooth family of intermediate sections.
"""

import math

import numpy as np


def ray_angles(n_points: int) -> np.ndarray:
    """Angles of the N sampling rays, starting on +X."""
    return np.linspace(0, 2 * math.pi, n_points, endpoint=False)


def circle_profile(radius: float, n_points: int = 64) -> np.ndarray:
    """Generate a circular cross-section.

    Args:
        radius: Circle radius in mm
        n_points: Number of points

    Returns:
        numpy array of shape (n_points, 2)
    """
    if radius <= 0:
        raise ValueError(f"Circle radius must be positive, got {radius}")
    a = ray_angles(n_points)
    return np.column_stack([radius * np.cos(a), radius * np.sin(a)])


def _rounded_rect_ray(cos_a: float, sin_a: float, half_w: float,
                      half_h: float, rc: float) -> float:
    """Distance from the centre to the rounded-rectangle boundary along a ray.

    Works in the first quadrant (cos_a, sin_a >= 0); the caller restores signs.
    """
    inner_w = half_w - rc
    inner_h = half_h - rc

    # Flat right edge
    if cos_a > 1e-12:
        t = half_w / cos_a
        if t * sin_a <= inner_h + 1e-12:
            return t

    # Flat top edge
    if sin_a > 1e-12:
        t = half_h / sin_a
        if t * cos_a <= inner_w + 1e-12:
            return t

    # Corner arc centred on (inner_w, inner_h)
    d_dot_c = cos_a * inner_w + sin_a * inner_h
    c2 = inner_w**2 + inner_h**2
    return d_dot_c + math.sqrt(max(d_dot_c**2 - c2 + rc**2, 0.0))


def rounded_rectangle_profile(width: float, height: float, corner_radius: float,
                              n_points: int = 64) -> np.ndarray:
    """Generate a rounded-rectangle cross-section sampled on the standard rays.

    Args:
        width: Extent along X in mm
        height: Extent along Y in mm
        corner_radius: Corner fillet radius (0 = sharp corners)
        n_points: Number of points

    Returns:
        numpy array of shape (n_points, 2)
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Rectangle size must be positive, got {width}x{height}")
    if corner_radius < 0 or corner_radius > min(width, height) / 2:
        raise ValueError(
            f"Corner radius {corner_radius} outside [0, {min(width, height) / 2}]"
        )

    half_w = width / 2
    half_h = height / 2
    coords = np.empty((n_points, 2))
    for k, a in enumerate(ray_angles(n_points)):
        c = math.cos(a)
        s = math.sin(a)
        t = _rounded_rect_ray(abs(c), abs(s), half_w, half_h, corner_radius)
        coords[k] = (t * c, t * s)
    return coords


def blend_profiles(profile_start: np.ndarray, profile_end: np.ndarray,
                   fraction: float) -> np.ndarray:
    """Linearly interpolate between two cross-sections.

    Both profiles must have the same number of points.

    Args:
        profile_start: Start coordinates (N, 2)
        profile_end: End coordinates (N, 2)
        fraction: 0.0 = start, 1.0 = end

    Returns:
        Blended profile coordinates (N, 2)
    """
    if profile_start.shape != profile_end.shape:
        raise ValueError(
            f"Profile shapes must match: {profile_start.shape} vs {profile_end.shape}"
        )
    return profile_start * (1 - fraction) + profile_end * fraction


def ease(t: float, easing: str = "linear") -> float:
    """Map t in [0, 1] through an easing curve (input is clamped)."""
    t = min(max(t, 0.0), 1.0)
    if easing == "linear":
        return t
    if easing == "smoothstep":
        return t * t * (3 - 2 * t)
    if easing == "cosine":
        return 0.5 - 0.5 * math.cos(math.pi * t)
    raise ValueError(f"Unknown easing '{easing}'")


def morph_fraction(progress: float, start: float, end: float,
                   easing: str = "linear") -> float:
    """Blend fraction at a path progress value for a morph window [start, end]."""
    if progress <= start:
        return 0.0
    if progress >= end:
        return 1.0
    return ease((progress - start) / (end - start), easing)


def morph_profile(progress: float, morph_cfg: dict, offset: float = 0.0) -> np.ndarray:
    """Cross-section at a given progress along the duct.

    Args:
        progress: 0.0 = intake, 1.0 = egress
        morph_cfg: Dict from config.get_morph_config()
        offset: Outward offset in mm added to radius, half-sizes and corner
            radius (wall thickness gives the outer wall)

    Returns:
        (N, 2) profile
    """
    n = morph_cfg["n_points"]
    circle = circle_profile(morph_cfg["intake_radius"] + offset, n)
    rect = rounded_rectangle_profile(
        morph_cfg["egress_width"] + 2 * offset,
        morph_cfg["egress_height"] + 2 * offset,
        morph_cfg["egress_corner_radius"] + offset,
        n,
    )
    fraction = morph_fraction(progress, morph_cfg["start"], morph_cfg["end"],
                              morph_cfg["easing"])
    return blend_profiles(circle, rect, fraction)


def polygon_area(points: np.ndarray) -> float:
    """Shoelace area of a closed polygon (positive for counter-clockwise)."""
    x = points[:, 0]
    y = points[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))
