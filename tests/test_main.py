"""Tests for the command-line entry point."""

import pytest
import yaml
from copy import deepcopy

import main


class TestCLI:
    """Test argument handling and exit codes."""

    def test_no_action_exits(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main.main([])
        assert exc.value.code == 1

    def test_bad_method_rejected(self):
        with pytest.raises(SystemExit) as exc:
            main.main(["--generate", "--method", "extrude"])
        assert exc.value.code == 2

    def test_config_error_exits(self, default_config, tmp_path, capsys):
        raw = deepcopy(default_config)
        del raw["derived"]
        raw["egress"]["width"] = -5
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.safe_dump(raw))

        with pytest.raises(SystemExit) as exc:
            main.main(["--config", str(path), "--analyze"])
        assert exc.value.code == 1
        assert "Egress width must be positive" in capsys.readouterr().err

    def test_validate_only_missing_stl(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as exc:
            main.main(["--validate-only", "--output", str(tmp_path / "missing.stl")])
        assert exc.value.code == 1
        assert "No STL found" in capsys.readouterr().out

    def test_generate_gated_by_validation(self, default_config, tmp_path, capsys):
        """Failing section checks stop generation before any geometry is built."""
        raw = deepcopy(default_config)
        del raw["derived"]
        raw["print"]["min_area_ratio"] = 0.9
        raw["output"]["directory"] = str(tmp_path)
        path = tmp_path / "choked.yaml"
        path.write_text(yaml.safe_dump(raw))

        with pytest.raises(SystemExit) as exc:
            main.main(["--config", str(path), "--generate"])
        assert exc.value.code == 1
        assert "Validation FAILED" in capsys.readouterr().out
