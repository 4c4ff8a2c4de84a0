"""run_monitor entry point."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

import run_monitor
from guardwatch_monitor.config import FeedConfig, MonitorConfig

SHIPPED_CONFIG = Path(__file__).resolve().parents[2] / "config" / "guardwatch.yaml"


def _make_config(**feed):
    feed.setdefault("base_url", "http://localhost:3001")
    return MonitorConfig(service_id="hq_monitor", feed=FeedConfig(**feed))


@pytest.mark.unit
class TestRunMonitor:
    def test_once_prints_stats(self, capsys):
        code = run_monitor.main(["--config", str(SHIPPED_CONFIG), "--once"])

        stats = json.loads(capsys.readouterr().out)
        assert code == 0
        assert stats["total_guards"] == 6
        assert stats["active_sites"] == 2

    def test_missing_config(self, capsys, tmp_path):
        assert run_monitor.main(["--config", str(tmp_path / "nope.yaml")]) == 1
        assert "not found" in capsys.readouterr().err

    def test_invalid_config(self, capsys, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text('service_id: "x"\nfeed: {}\n')

        assert run_monitor.main(["--config", str(path), "--once"]) == 1
        assert "base_url or snapshot_path" in capsys.readouterr().err

    def test_log_file_resolution(self):
        config = _make_config()
        args = run_monitor.parse_args(["--config", "c.yaml"])
        assert run_monitor.resolve_log_file(args, config) == run_monitor.DEFAULT_LOG_FILE

        args = run_monitor.parse_args(["--config", "c.yaml", "--log-file", "x.log"])
        assert run_monitor.resolve_log_file(args, config) == Path("x.log")

        args = run_monitor.parse_args(["--config", "c.yaml", "--no-log-file"])
        assert run_monitor.resolve_log_file(args, config) is None

    def test_log_file_flags_are_exclusive(self):
        with pytest.raises(SystemExit):
            run_monitor.parse_args(["--config", "c.yaml", "--log-file", "x.log", "--no-log-file"])

    def test_describe(self):
        lines = run_monitor.describe(_make_config(simulate=True, simulation_step_m=10.0))

        assert lines[0] == "service_id=hq_monitor"
        assert "API http://localhost:3001" in lines[1]
        assert "10.0 m" in lines[2]
        assert lines[3].startswith("framing: 4 attempts")
