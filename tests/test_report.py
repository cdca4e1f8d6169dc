"""Tests for report generation."""

import pytest
import trimesh
from src.assembly import DuctAssembly
from validation.mesh_validator import MeshValidator
from validation.report_generator import ReportGenerator
from tests.conftest import modified_config


@pytest.fixture
def analysis(default_config, tmp_path):
    return DuctAssembly(default_config, output_dir=str(tmp_path)).run_analysis()


class TestValidationReport:
    """Test the text validation report."""

    def test_pass_report(self, default_config, analysis, tmp_path):
        report = ReportGenerator(default_config, output_dir=str(tmp_path))
        text = report.generate_validation_report(analysis)
        assert "OVERALL STATUS: *** PASS ***" in text
        assert "[PASS] wall_thickness" in text
        assert (tmp_path / "validation_report.txt").read_text() == text

    def test_section_table_in_report(self, default_config, analysis, tmp_path):
        text = ReportGenerator(default_config, output_dir=str(tmp_path)).generate_validation_report(analysis)
        # header + one row per section
        table = ReportGenerator.format_section_table(analysis["sections"])
        assert len(table.splitlines()) == default_config["shell"]["num_sections"] + 1
        assert table in text

    def test_fail_report_has_suggestions(self, default_config, tmp_path):
        cfg = modified_config(default_config, "print", min_area_ratio=0.9)
        failing = DuctAssembly(cfg, output_dir=str(tmp_path)).run_analysis()
        text = ReportGenerator(cfg, output_dir=str(tmp_path)).generate_validation_report(failing)
        assert "OVERALL STATUS: *** FAIL ***" in text
        assert "SUGGESTIONS:" in text
        assert "Enlarge the egress" in text

    def test_mesh_section(self, default_config, analysis, tmp_path):
        tube = trimesh.creation.annulus(r_min=30, r_max=32, height=20)
        tube.apply_translation([0, 0, 10])
        mesh_result = MeshValidator(default_config).validate_mesh(
            tube, "tube", check_intake_seam=True
        )
        text = ReportGenerator(default_config, output_dir=str(tmp_path)).generate_validation_report(
            analysis, mesh_result
        )
        assert "MESH VALIDATION" in text
        assert "[PASS] tube: watertight" in text


class TestBOM:
    """Test the bill of materials."""

    def test_bom_lists_fasteners(self, default_config, tmp_path):
        text = ReportGenerator(default_config, output_dir=str(tmp_path)).generate_bom()
        assert "140mm axial fan" in text
        assert "M4 screw" in text
        assert "qty: 4" in text
        assert (tmp_path / "bom.txt").exists()

    def test_bom_filament_volume(self, default_config, tmp_path):
        text = ReportGenerator(default_config, output_dir=str(tmp_path)).generate_bom(
            mesh_volume_mm3=45000.0
        )
        assert "45.0cm³" in text
