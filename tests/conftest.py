"""Shared test fixtures, tolerance helpers, and cached results."""

import pytest
from copy import deepcopy
from src.config import load_config, compute_derived, DEFAULT_CONFIG_PATH


# ---------------------------------------------------------------------------
# Tolerance helpers
# ---------------------------------------------------------------------------

def assert_within_range(value: float, min_val: float, max_val: float, unit: str = "mm"):
    """Assert that a value falls within [min_val, max_val].

    Args:
        value: Measured value
        min_val: Minimum acceptable value
        max_val: Maximum acceptable value
        unit: Unit string for error message
    """
    assert min_val <= value <= max_val, (
        f"Value {value:.4f} {unit} is outside range "
        f"[{min_val:.4f}, {max_val:.4f}] {unit}"
    )


def modified_config(config: dict, section: str, **values) -> dict:
    """Deep copy of a loaded config with one section patched and derived recomputed.

    Skips validation so tests can build deliberately bad geometry.
    """
    cfg = deepcopy(config)
    cfg[section].update(values)
    compute_derived(cfg)
    return cfg


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def default_config():
    """Load the default configuration (session-scoped, loaded once)."""
    return load_config(DEFAULT_CONFIG_PATH)


@pytest.fixture(scope="session")
def default_sections(default_config):
    """Section sequence for the default config."""
    from src.shell_generator import ShellGenerator
    return ShellGenerator(default_config).sections()


@pytest.fixture(scope="session")
def swept_mesh(default_config, tmp_path_factory):
    """trimesh.Trimesh of the default duct built with the path sweep.

    Session-scoped so CAD generation only happens once per test session.
    Returns None if CadQuery is not available or the kernel fails.
    """
    try:
        from src.assembly import DuctAssembly
        out_dir = tmp_path_factory.mktemp("sweep")
        assembly = DuctAssembly(default_config, output_dir=str(out_dir))
        return assembly.generate_mesh("sweep")
    except (ImportError, Exception):
        return None


@pytest.fixture(scope="session")
def hull_mesh(default_config, tmp_path_factory):
    """trimesh.Trimesh of the default duct built with the chained hull.

    Returns None if CadQuery or the manifold boolean engine is unavailable.
    """
    try:
        from src.assembly import DuctAssembly
        out_dir = tmp_path_factory.mktemp("hull")
        assembly = DuctAssembly(default_config, output_dir=str(out_dir))
        return assembly.generate_mesh("hull")
    except (ImportError, Exception):
        return None
