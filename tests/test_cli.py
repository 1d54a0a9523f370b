import datetime as dt
from pathlib import Path

import pytest

from portfolio_timeline.__main__ import main
from portfolio_timeline.portfolio_models import Interval
from portfolio_timeline.render_svg import render_svg

SAMPLE = str(Path(__file__).resolve().parents[1] / "examples_data" / "portfolio.yaml")


def test_render_prints_frame_and_status(capsys):
    code = main(["render", SAMPLE, "--today", "2024-01-12", "--at", "2024-01-01", "--width", "40", "--height", "4"])

    out = capsys.readouterr().out
    assert code == 0
    assert out.splitlines()[0].startswith("Jan 05 08")
    assert "Zoom: 1 day/column" in out
    assert "From 2024-01-01" in out
    assert "No project selected" not in out
    assert "Warehouse" in out


def test_render_reports_hidden_lanes(capsys):
    code = main(["render", SAMPLE, "--today", "2024-01-12", "--at", "2024-01-01", "--height", "2", "--select", "2"])

    out = capsys.readouterr().out
    assert code == 0
    assert "more lane(s) not shown" in out
    assert "[2/5] Billing migration" in out


def test_missing_snapshot_exits_with_one(tmp_path, capsys):
    code = main(["render", str(tmp_path / "missing.yaml")])

    assert code == 1
    assert "snapshot file not found" in capsys.readouterr().err


def test_invalid_snapshot_exits_with_two(tmp_path, capsys):
    snapshot = tmp_path / "bad.yaml"
    snapshot.write_text("projects:\n  - id: p-1\n", encoding="utf-8")

    code = main(["render", str(snapshot)])

    assert code == 2
    assert capsys.readouterr().err.startswith("Error:")


def test_invalid_config_exits_with_two(tmp_path, capsys):
    config = tmp_path / "timeline.yaml"
    config.write_text("timeline:\n  zoom_min: 0\n", encoding="utf-8")

    code = main(["render", SAMPLE, "--config", str(config)])

    assert code == 2
    assert "zoom_min" in capsys.readouterr().err


def test_bad_date_argument_is_a_usage_error():
    with pytest.raises(SystemExit) as excinfo:
        main(["render", SAMPLE, "--today", "12/01/2024"])

    assert excinfo.value.code == 2


def test_export_writes_svg(tmp_path):
    out = tmp_path / "chart" / "timeline.svg"

    code = main(["export", SAMPLE, "--today", "2024-01-12", "--out", str(out), "--title", "Portfolio"])

    assert code == 0
    assert out.exists()
    assert out.read_text(encoding="utf-8").lstrip().startswith("<?xml")


def test_export_of_empty_snapshot_fails(tmp_path, capsys):
    snapshot = tmp_path / "empty.yaml"
    snapshot.write_text("projects: []\n", encoding="utf-8")

    code = main(["export", str(snapshot), "--out", str(tmp_path / "x.svg")])

    assert code == 2
    assert "no projects" in capsys.readouterr().err


def test_render_svg_rejects_empty_input(tmp_path):
    with pytest.raises(ValueError):
        render_svg([], out_path=str(tmp_path / "x.svg"), today=dt.date(2024, 1, 1))


def test_render_svg_single_day_interval(tmp_path):
    out = tmp_path / "single.svg"

    render_svg(
        [Interval("d", dt.date(2024, 1, 3), dt.date(2024, 1, 3), "Review")],
        out_path=str(out),
        today=dt.date(2024, 1, 1),
    )

    assert out.stat().st_size > 0


@pytest.mark.parametrize(
    "content",
    [b"projects:\n  - id: p-1\n    start_date: 2024-02-30\n", b"projects: \xff\n"],
)
def test_unreadable_snapshot_exits_with_two(tmp_path, capsys, content):
    snapshot = tmp_path / "bad.yaml"
    snapshot.write_bytes(content)

    code = main(["render", str(snapshot)])

    assert code == 2
    assert capsys.readouterr().err.startswith("Error:")
