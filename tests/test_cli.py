"""
Tests for the command-line interface and run reports.
"""

import json

import numpy as np
import pytest
import tifffile

from hdrtmo.cli import create_parser, main
from hdrtmo.config import ICam06Config, ToneMapResult
from hdrtmo.report import build_report, write_report_json


@pytest.fixture
def hdr_tiff(tmp_path, bright_patch_image):
    """Write the bright patch scene as a float RGB TIFF."""
    path = tmp_path / "scene.tif"
    tifffile.imwrite(path, bright_patch_image(size=12).rgb().astype(np.float32))
    return path


class TestParser:
    """Tests for argument parsing."""

    def test_icam06_defaults(self):
        args = create_parser().parse_args(["icam06", "in.hdr", "out.tif"])
        assert args.contrast == 0.75
        assert args.min_clip == 0.01
        assert args.max_clip == 0.99
        assert args.workers is None
        assert args.space == "rgb"

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc:
            create_parser().parse_args(["--version"])
        assert exc.value.code == 0
        assert "hdrtmo" in capsys.readouterr().out

    def test_no_command(self):
        assert main([]) == 1


class TestCommands:
    """Tests for running the commands."""

    def test_icam06_writes_output_and_report(self, tmp_path, hdr_tiff):
        output = tmp_path / "out.tif"
        report = tmp_path / "report.json"
        code = main([
            "icam06", str(hdr_tiff), str(output),
            "--workers", "2", "--tile-size", "4", "--report", str(report), "-q",
        ])
        assert code == 0

        raster = tifffile.imread(output)
        assert raster.shape == (12, 12, 3)
        assert raster.dtype == np.uint16

        data = json.loads(report.read_text())
        assert data["width"] == 12
        assert data["config"]["tile_size"] == 4
        assert data["reductions"]["peak_luminance"] == 20000.0

    def test_icam06_missing_input(self, tmp_path):
        assert main(["icam06", str(tmp_path / "none.tif"), str(tmp_path / "o.tif")]) == 1

    def test_icam06_invalid_workers(self, tmp_path, hdr_tiff):
        assert main(["icam06", str(hdr_tiff), str(tmp_path / "o.tif"), "--workers", "0", "-q"]) == 1

    def test_info(self, hdr_tiff, capsys):
        assert main(["info", str(hdr_tiff)]) == 0
        assert "12x12" in capsys.readouterr().out


class TestReport:
    """Tests for the JSON run report."""

    def test_build_report_native_types(self):
        result = ToneMapResult(
            raster=np.zeros((3, 4, 4), dtype=np.uint16),
            peak_luminance=np.float64(20000.0),
            min_rgb=np.float64(-0.1),
            max_rgb=np.float64(0.9),
            durations={"luminance": np.float64(0.5)},
            config=ICam06Config(),
            version="0.0.0",
        )
        report = build_report(result, source="in.hdr")
        assert report["width"] == 4
        assert report["height"] == 3
        assert type(report["reductions"]["peak_luminance"]) is float
        assert report["config"]["contrast"] == 0.75
        assert "raster" not in report
        json.dumps(report)

    def test_write_report_json(self, tmp_path):
        result = ToneMapResult(raster=np.zeros((2, 2, 4), dtype=np.uint16))
        path = write_report_json(result, tmp_path / "sub" / "r.json")
        assert json.loads(path.read_text())["config"] is None
