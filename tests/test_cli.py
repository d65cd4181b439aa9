"""Tests for the CLI entry point (tabledeck.cli).

Covers argument parsing, config loading and overrides, the generate
pipeline, validate, inspect and config commands, and error handling.
"""

import io
from unittest.mock import MagicMock, patch

import pytest
import yaml
from pptx import Presentation

from tabledeck.cli import (
    _load_config,
    _sheet,
    build_parser,
    cmd_generate,
    main,
)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def parser():
    return build_parser()


@pytest.fixture
def source(tmp_path):
    """A small CSV source with 45 data rows."""
    path = tmp_path / "data.csv"
    lines = ["Region,Units,Price"]
    lines += [f"Region {i},{i},{i * 1.5:.2f}" for i in range(1, 46)]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def qa_fail():
    """A failing QAResult mock."""
    qa = MagicMock()
    qa.passed = False
    qa.summary.return_value = "QA FAIL: 1 error(s), 0 warning(s) across 2 slide(s)"
    qa.report.return_value = "QA FAIL\n  [ERROR] slide 0: bad"
    return qa


# ===================================================================
# Parser tests
# ===================================================================

class TestParser:
    def test_generate_minimal(self, parser):
        args = parser.parse_args(["generate", "data.xlsx", "-o", "out.pptx"])
        assert args.command == "generate"
        assert args.input == "data.xlsx"
        assert args.output == "out.pptx"
        assert args.sheet is None
        assert args.rows_per_slide is None
        assert args.skip_qa is False
        assert args.verbose is False

    def test_generate_all_flags(self, parser):
        args = parser.parse_args([
            "generate", "data.xlsx", "-o", "out.pptx",
            "--sheet", "Q1", "--rows-per-slide", "20", "--margin", "100000",
            "--font", "DejaVu Sans", "--font-size", "16",
            "--config", "deck.yaml", "--skip-qa", "-v",
        ])
        assert args.sheet == "Q1"
        assert args.rows_per_slide == 20
        assert args.margin == 100000
        assert args.font == "DejaVu Sans"
        assert args.font_size == 16
        assert args.config == "deck.yaml"
        assert args.skip_qa is True
        assert args.verbose is True

    def test_generate_requires_output(self, parser):
        with pytest.raises(SystemExit):
            parser.parse_args(["generate", "data.xlsx"])

    def test_validate(self, parser):
        args = parser.parse_args(["validate", "--pptx", "deck.pptx", "--slides", "3"])
        assert args.pptx == "deck.pptx"
        assert args.slides == 3

    def test_inspect(self, parser):
        args = parser.parse_args(["inspect", "data.csv", "-v"])
        assert args.input == "data.csv"
        assert args.verbose is True

    def test_no_command(self, parser):
        with pytest.raises(SystemExit):
            parser.parse_args([])


# ===================================================================
# Config loading
# ===================================================================

class TestLoadConfig:
    def test_defaults(self, parser):
        args = parser.parse_args(["generate", "d.csv", "-o", "o.pptx"])
        config = _load_config(args)
        assert config.rows_per_slide == 30
        assert config.style.font_family == "Arial"

    def test_overrides(self, parser):
        args = parser.parse_args([
            "generate", "d.csv", "-o", "o.pptx",
            "--rows-per-slide", "5", "--font", "DejaVu Sans", "--font-size", "12",
        ])
        config = _load_config(args)
        assert config.rows_per_slide == 5
        assert config.style.font_family == "DejaVu Sans"
        assert config.style.font_size == 12

    def test_config_file_then_overrides(self, parser, tmp_path):
        cfg = tmp_path / "deck.yaml"
        cfg.write_text(yaml.safe_dump({"rows_per_slide": 7, "slide": {"margin": 200000}}))
        args = parser.parse_args([
            "generate", "d.csv", "-o", "o.pptx", "--config", str(cfg), "--margin", "300000",
        ])
        config = _load_config(args)
        assert config.rows_per_slide == 7
        assert config.margin == 300000

    def test_invalid_override_exits(self, parser, capsys):
        args = parser.parse_args(["generate", "d.csv", "-o", "o.pptx", "--rows-per-slide", "0"])
        with pytest.raises(SystemExit) as excinfo:
            _load_config(args)
        assert excinfo.value.code == 1
        assert "rows_per_slide" in capsys.readouterr().err

    def test_missing_config_file_exits(self, parser, tmp_path):
        args = parser.parse_args([
            "generate", "d.csv", "-o", "o.pptx", "--config", str(tmp_path / "nope.yaml"),
        ])
        with pytest.raises(SystemExit):
            _load_config(args)


class TestSheet:
    def test_none(self, parser):
        args = parser.parse_args(["inspect", "d.xlsx"])
        assert _sheet(args) is None

    def test_numeric_is_index(self, parser):
        args = parser.parse_args(["inspect", "d.xlsx", "--sheet", "2"])
        assert _sheet(args) == 2

    def test_name(self, parser):
        args = parser.parse_args(["inspect", "d.xlsx", "--sheet", "Sales"])
        assert _sheet(args) == "Sales"


# ===================================================================
# generate
# ===================================================================

class TestGenerate:
    def test_end_to_end(self, source, tmp_path, capsys):
        output = tmp_path / "out" / "deck.pptx"
        main(["generate", str(source), "-o", str(output)])
        prs = Presentation(str(output))
        assert len(prs.slides) == 2
        err = capsys.readouterr().err
        assert "Found 3 columns and 45 data rows" in err
        assert "QA PASS" in err
        assert "Success! Presentation saved to:" in err

    def test_rows_per_slide(self, source, tmp_path):
        output = tmp_path / "deck.pptx"
        main(["generate", str(source), "-o", str(output), "--rows-per-slide", "10"])
        assert len(Presentation(str(output)).slides) == 5

    def test_skip_qa(self, source, tmp_path, capsys):
        output = tmp_path / "deck.pptx"
        main(["generate", str(source), "-o", str(output), "--skip-qa"])
        assert output.exists()
        assert "QA validation skipped" in capsys.readouterr().err

    def test_missing_input(self, tmp_path, capsys):
        output = tmp_path / "deck.pptx"
        with pytest.raises(SystemExit) as excinfo:
            main(["generate", str(tmp_path / "missing.xlsx"), "-o", str(output)])
        assert excinfo.value.code == 1
        assert "input_not_found" in capsys.readouterr().err
        assert not output.exists()

    def test_header_only(self, tmp_path, capsys):
        source = tmp_path / "data.csv"
        source.write_text("A,B\n", encoding="utf-8")
        output = tmp_path / "deck.pptx"
        with pytest.raises(SystemExit):
            main(["generate", str(source), "-o", str(output)])
        assert "empty_dataset" in capsys.readouterr().err
        assert not output.exists()

    def test_qa_failure_blocks_write(self, source, tmp_path, qa_fail, capsys):
        output = tmp_path / "deck.pptx"
        args = build_parser().parse_args(["generate", str(source), "-o", str(output), "-v"])
        with patch("tabledeck.cli.PackageValidator") as validator_cls:
            validator_cls.return_value.validate.return_value = qa_fail
            with pytest.raises(SystemExit):
                cmd_generate(args)
        assert not output.exists()
        assert "QA FAIL" in capsys.readouterr().err


# ===================================================================
# validate / inspect / config
# ===================================================================

class TestValidate:
    def test_valid_deck(self, source, tmp_path, capsys):
        output = tmp_path / "deck.pptx"
        main(["generate", str(source), "-o", str(output), "--skip-qa"])
        with pytest.raises(SystemExit) as excinfo:
            main(["validate", "--pptx", str(output), "--slides", "2"])
        assert excinfo.value.code == 0
        assert "QA PASS" in capsys.readouterr().out

    def test_wrong_slide_count(self, source, tmp_path):
        output = tmp_path / "deck.pptx"
        main(["generate", str(source), "-o", str(output), "--skip-qa"])
        with pytest.raises(SystemExit) as excinfo:
            main(["validate", "--pptx", str(output), "--slides", "5"])
        assert excinfo.value.code == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(SystemExit) as excinfo:
            main(["validate", "--pptx", str(tmp_path / "nope.pptx")])
        assert excinfo.value.code == 1


class TestInspect:
    def test_summary(self, source, capsys):
        main(["inspect", str(source)])
        out = capsys.readouterr().out
        assert "Columns:     3" in out
        assert "Data rows:   45" in out
        assert "Slides:      2 (30 rows/slide)" in out

    def test_verbose_plan(self, source, capsys):
        main(["inspect", str(source), "-v", "--rows-per-slide", "20"])
        out = capsys.readouterr().out
        assert "[ 0] Region" in out
        assert "slide   1: rows 1-20" in out
        assert "slide   3: rows 41-45" in out

    def test_missing_input(self, tmp_path):
        with pytest.raises(SystemExit):
            main(["inspect", str(tmp_path / "missing.csv")])


class TestConfigCommand:
    def test_writes_yaml(self, tmp_path):
        path = tmp_path / "deck.yaml"
        main(["config", "-o", str(path), "--rows-per-slide", "12", "--font", "DejaVu Sans"])
        data = yaml.safe_load(path.read_text())
        assert data["rows_per_slide"] == 12
        assert data["style"]["typography"]["font_family"] == "DejaVu Sans"
