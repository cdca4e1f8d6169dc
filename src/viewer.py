"""Interactive 3D viewer and preview renders using PyVista.

Shows the exported duct with colour guides: the intake ring, the egress ring
and the intermediate section rings overlaid as lines, so the morph and the
plate/shell boundary can be inspected by eye.
"""

import os
from typing import Optional

import numpy as np
import pyvista as pv

from src.shell_generator import ShellGenerator


# Color scheme for the part and guides
GUIDE_COLORS = {
    "duct": (0.9, 0.9, 0.95),          # near-white
    "intake": (0.2, 0.4, 0.8),         # blue
    "egress": (0.8, 0.2, 0.2),         # red
    "section": (0.85, 0.65, 0.13),     # gold
}


def _ring_polyline(ring: np.ndarray) -> pv.PolyData:
    """Closed polyline through a (N, 3) ring."""
    return pv.lines_from_points(np.vstack([ring, ring[:1]]))


def _add_scene(plotter: pv.Plotter, mesh: pv.PolyData, config: Optional[dict],
               clip: bool = False) -> None:
    """Add the part and (if a config is given) the section guides."""
    display_mesh = mesh.clip("-y", invert=False) if clip else mesh
    plotter.add_mesh(
        display_mesh,
        color=GUIDE_COLORS["duct"],
        opacity=0.6 if config else 1.0,
        smooth_shading=True,
        label="duct",
    )

    if config:
        sections = ShellGenerator(config).sections()
        for i, s in enumerate(sections):
            if i == 0:
                key = "intake"
            elif i == len(sections) - 1:
                key = "egress"
            else:
                key = "section"
            plotter.add_mesh(
                _ring_polyline(s.inner),
                color=GUIDE_COLORS[key],
                line_width=4 if key != "section" else 2,
            )
        plotter.add_legend(
            [[name, color] for name, color in GUIDE_COLORS.items()],
            bcolor=(1, 1, 1),
            face="circle",
            size=(0.2, 0.2),
        )
    plotter.add_axes()


def view_part(stl_path: str, config: Optional[dict] = None,
              window_size: Optional[tuple] = None):
    """Display an STL in an interactive viewer.

    Args:
        stl_path: Path to the STL file
        config: Optional loaded config; when given, section guides are drawn
        window_size: Optional (width, height) tuple for the viewer window
    """
    if not os.path.exists(stl_path):
        print(f"STL file not found: {stl_path}")
        return

    mesh = pv.read(stl_path)
    plotter = pv.Plotter(window_size=window_size or (1400, 900))
    plotter.set_background("white")

    clip_state = {"active": False}

    def toggle_clip():
        """Toggle clip plane to reveal the bore."""
        clip_state["active"] = not clip_state["active"]
        plotter.clear()
        _add_scene(plotter, mesh, config, clip=clip_state["active"])
        plotter.render()

    _add_scene(plotter, mesh, config)
    plotter.add_key_event("c", toggle_clip)
    plotter.add_text("Press 'C' for cross-section", position="lower_left", font_size=10)

    plotter.camera.zoom(0.8)
    print(f"Displaying {os.path.basename(stl_path)}. Press 'C' to toggle cross-section. "
          "Close window to exit.")
    plotter.show()


def render_preview(stl_path: str, image_path: str, config: Optional[dict] = None,
                   window_size: tuple = (1200, 900), clip: bool = False) -> str:
    """Render an STL off-screen to a PNG for visual inspection.

    Returns:
        The image path written
    """
    mesh = pv.read(stl_path)
    plotter = pv.Plotter(off_screen=True, window_size=window_size)
    plotter.set_background("white")
    _add_scene(plotter, mesh, config, clip=clip)
    plotter.camera_position = "iso"

    parent = os.path.dirname(image_path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    plotter.screenshot(image_path)
    plotter.close()
    return image_path
