from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from conftest import make_tree
from msfs_checksum import cli
from msfs_checksum.cli import (
    EXIT_ANOMALIES, EXIT_CONFIG, EXIT_NO_INSTALL, EXIT_NOTHING, EXIT_OK, EXIT_WRITE, run_cli,
)
from msfs_checksum.main import main


@pytest.fixture(autouse=True)
def _quiet_host(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli, "describe_host", lambda: "test cpu")
    monkeypatch.delenv("LOCALAPPDATA", raising=False)
    monkeypatch.delenv("APPDATA", raising=False)


@pytest.fixture
def official(tmp_path: Path) -> Path:
    return make_tree(tmp_path / "Official", {"a.bin": b"a", "sub/b.bin": b"bb"})


def test_help_exits_without_scanning(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as info:
        run_cli(["--help"])
    assert info.value.code == 0
    out = capsys.readouterr().out
    assert "--output" in out and "--packages" in out and "--threads" in out


def test_output_is_required() -> None:
    with pytest.raises(SystemExit) as info:
        run_cli(["-P", "."])
    assert info.value.code == 2


def test_success(tmp_path: Path, official: Path, capsys: pytest.CaptureFixture[str]) -> None:
    out = tmp_path / "out.txt"
    rc = main(["-o", str(out), "-P", str(official), "-T", "2", "--no-progress"])
    assert rc == EXIT_OK
    assert len(out.read_text(encoding="utf-8").splitlines()) == 2
    err = capsys.readouterr().err
    assert "Completed." in err
    assert "Host: test cpu" in err


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="no FIFOs on this platform")
def test_anomalies_give_partial_exit_code(tmp_path: Path, official: Path) -> None:
    # a fifo is never opened, it only shows up in the report
    os.mkfifo(official / "pipe")
    rc = run_cli(["-o", str(tmp_path / "out.txt"), "-P", str(official), "--no-progress"])
    assert rc == EXIT_ANOMALIES
    assert (tmp_path / "out.txt").exists()
    assert "special-file" in (tmp_path / "out.txt.anomalies.txt").read_text(encoding="utf-8")


def test_bad_override(tmp_path: Path) -> None:
    rc = run_cli(["-o", str(tmp_path / "out.txt"), "-P", str(tmp_path / "missing"), "--no-progress"])
    assert rc == EXIT_CONFIG
    assert not (tmp_path / "out.txt").exists()


def test_no_install(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    rc = run_cli(["-o", str(tmp_path / "out.txt"), "--no-progress"])
    assert rc == EXIT_NO_INSTALL
    assert "Failed to start" in capsys.readouterr().err


def test_nothing_to_hash(tmp_path: Path) -> None:
    empty = tmp_path / "Official"
    empty.mkdir()
    rc = run_cli(["-o", str(tmp_path / "out.txt"), "-P", str(empty), "--no-progress"])
    assert rc == EXIT_NOTHING
    assert not (tmp_path / "out.txt").exists()


def test_write_failure(tmp_path: Path, official: Path) -> None:
    rc = run_cli(["-o", str(tmp_path / "gone" / "out.txt"), "-P", str(official), "--no-progress"])
    assert rc == EXIT_WRITE


def test_custom_report_and_summary(tmp_path: Path, official: Path) -> None:
    report = tmp_path / "problems.txt"
    summary = tmp_path / "summary.json"
    rc = run_cli(["-o", str(tmp_path / "out.txt"), "-P", str(official), "--relative",
                  "--report", str(report), "--summary", str(summary), "--no-progress"])
    assert rc == EXIT_OK
    assert report.read_text(encoding="utf-8").splitlines()[1] == "# anomalies: 0"
    assert json.loads(summary.read_text(encoding="utf-8"))["hashed"] == 2
    paths = [l.split(" ", 2)[2] for l in (tmp_path / "out.txt").read_text(encoding="utf-8").splitlines()]
    assert paths == ["a.bin", "sub/b.bin"]


def test_negative_threads_is_config_error(tmp_path: Path, official: Path) -> None:
    rc = run_cli(["-o", str(tmp_path / "out.txt"), "-P", str(official), "-T", "-1", "--no-progress"])
    assert rc == EXIT_CONFIG
