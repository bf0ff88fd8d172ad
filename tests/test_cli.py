"""CLI tests for the compare and sample subcommands."""

import json
import sys
from pathlib import Path

import pytest

from archerdiff import cli


def _run_cli(args, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["archerdiff"] + args)
    return cli.main()


def _write_json(path: Path, data) -> Path:
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def test_compare_with_differences_exits_1(monkeypatch, capsys, sample_files):
    source_path, target_path = sample_files
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["compare", "--source", str(source_path), "--target", str(target_path)], monkeypatch)
    assert excinfo.value.code == 1
    out = capsys.readouterr().out
    assert "DIFFERENCES FOUND" in out
    assert "Mismatched:" in out
    assert "Not in Production: 1" in out


def test_compare_identical_exits_0(monkeypatch, capsys, sample_files):
    source_path, _ = sample_files
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["compare", "--source", str(source_path), "--target", str(source_path)], monkeypatch)
    assert excinfo.value.code == 0
    assert "[OK] Comparison complete: ALL ITEMS MATCH" in capsys.readouterr().out


def test_compare_writes_requested_formats(monkeypatch, capsys, tmp_path, sample_files):
    source_path, target_path = sample_files
    out_dir = tmp_path / "reports"
    with pytest.raises(SystemExit):
        _run_cli([
            "compare", "--source", str(source_path), "--target", str(target_path),
            "--output-dir", str(out_dir), "--format", "csv", "--format", "xlsx",
            "--source-name", "DEV", "--target-name", "PROD",
        ], monkeypatch)

    assert sorted(p.name for p in out_dir.iterdir()) == ["comparison.csv", "comparison.xlsx"]
    out = capsys.readouterr().out
    assert "Not in PROD" in out


def test_compare_default_formats(monkeypatch, tmp_path, sample_files):
    source_path, target_path = sample_files
    out_dir = tmp_path / "reports"
    with pytest.raises(SystemExit):
        _run_cli([
            "compare", "--source", str(source_path), "--target", str(target_path),
            "--output-dir", str(out_dir), "--quiet",
        ], monkeypatch)

    data = json.loads((out_dir / "comparison.json").read_text(encoding="utf-8"))
    assert data["summary"]["totalItems"] == len(data["results"])
    assert (out_dir / "comparison.md").exists()


def test_compare_missing_file_exits_2(monkeypatch, capsys, tmp_path, sample_files):
    source_path, _ = sample_files
    with pytest.raises(SystemExit) as excinfo:
        _run_cli([
            "compare", "--source", str(source_path), "--target", str(tmp_path / "nope.json"),
        ], monkeypatch)
    assert excinfo.value.code == 2
    assert "Error:" in capsys.readouterr().err


def test_compare_malformed_document_exits_2(monkeypatch, capsys, tmp_path, sample_files):
    source_path, _ = sample_files
    bad = _write_json(tmp_path / "bad.json", ["not", "an", "object"])
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["compare", "--source", str(source_path), "--target", str(bad)], monkeypatch)
    assert excinfo.value.code == 2


def test_compare_quiet_prints_nothing(monkeypatch, capsys, sample_files):
    source_path, target_path = sample_files
    with pytest.raises(SystemExit):
        _run_cli(["compare", "--source", str(source_path), "--target", str(target_path), "--quiet"], monkeypatch)
    assert capsys.readouterr().out == ""


def test_sample_writes_pair(monkeypatch, capsys, tmp_path):
    out_dir = tmp_path / "sample"
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["sample", "--out", str(out_dir), "--seed", "11"], monkeypatch)
    assert excinfo.value.code == 0
    assert (out_dir / "source.json").exists()
    assert (out_dir / "target.json").exists()
    assert "[OK] Sample snapshots written" in capsys.readouterr().out

    source = json.loads((out_dir / "source.json").read_text(encoding="utf-8"))
    assert source["environmentName"] == "Development"
    assert source["calculatedFields"][0]["isCalculated"] is True


def test_sample_without_drift_compares_clean_except_missing(monkeypatch, capsys, tmp_path):
    out_dir = tmp_path / "sample"
    with pytest.raises(SystemExit):
        _run_cli(["sample", "--out", str(out_dir), "--no-mismatches", "--no-formula-differences", "--quiet"],
                 monkeypatch)
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["compare", "--source", str(out_dir / "source.json"),
                  "--target", str(out_dir / "target.json")], monkeypatch)
    assert excinfo.value.code == 1
    assert "Mismatched: 0" in capsys.readouterr().out


def test_no_command_prints_help(monkeypatch, capsys):
    with pytest.raises(SystemExit) as excinfo:
        _run_cli([], monkeypatch)
    assert excinfo.value.code == 2
    assert "archerdiff" in capsys.readouterr().out
