"""Test the shiftsleep cli."""

import json
import pathlib

import pytest
from click import testing

from shiftsleep import cli
from shiftsleep.samples import RawSample

from tests.conftest import write_jsonl


def _entry(sample: RawSample) -> dict:
    return {
        "deviceId": sample.device_id,
        "metricType": sample.metric_type,
        "value": sample.value,
        "startTime": sample.start_time,
        "endTime": sample.end_time,
    }


@pytest.fixture
def runner() -> testing.CliRunner:
    return testing.CliRunner()


@pytest.fixture
def samples_file(tmp_path: pathlib.Path, night_samples) -> pathlib.Path:
    entries = [_entry(s) for s in night_samples]
    return write_jsonl(tmp_path / "samples.jsonl", entries)


class TestReportCommand:
    def test_summary(self, runner, samples_file):
        result = runner.invoke(cli.main, ["report", str(samples_file), "--date", "2025-01-15"])
        assert result.exit_code == 0, result.output
        assert "Sleep Report: dev-1 2025-01-15" in result.output
        assert "Total sleep:   6h 30m" in result.output
        assert "Intervals:     4" in result.output

    def test_json(self, runner, samples_file):
        result = runner.invoke(
            cli.main,
            ["report", str(samples_file), "-d", "2025-01-15", "-s", "day", "--json"],
        )
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["shift"] == "day"
        assert data["stage_durations"]["light_sleep"] == 3.5 * 3600
        assert data["dropped"] == {"outside_shift_window": 2}

    def test_output_file(self, runner, samples_file, tmp_path):
        out = tmp_path / "report.json"
        result = runner.invoke(
            cli.main,
            ["report", str(samples_file), "-d", "2025-01-15", "-o", str(out)],
        )
        assert result.exit_code == 0, result.output
        assert f"Report written to {out}" in result.output
        assert json.loads(out.read_text())["total_sleep_time"] == 6.5 * 3600

    def test_no_filter_vitals(self, runner, samples_file):
        result = runner.invoke(
            cli.main,
            ["report", str(samples_file), "-d", "2025-01-15", "-s", "day",
             "--no-filter-vitals", "--json"],
        )
        assert json.loads(result.output)["heart_rate"]["max"] == 71.0

    def test_bad_date(self, runner, samples_file):
        result = runner.invoke(cli.main, ["report", str(samples_file), "-d", "yesterday"])
        assert result.exit_code == 2

    def test_missing_file(self, runner, tmp_path):
        result = runner.invoke(
            cli.main, ["report", str(tmp_path / "nope.jsonl"), "-d", "2025-01-15"]
        )
        assert result.exit_code == 2

    def test_malformed_json_file(self, runner, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("[{bad")
        result = runner.invoke(cli.main, ["report", str(bad), "-d", "2025-01-15"])
        assert result.exit_code == 2
        assert "not readable JSON" in result.output


class TestWindowCommand:
    def test_day(self, runner):
        result = runner.invoke(cli.main, ["window", "day", "-d", "2025-01-15"])
        assert result.exit_code == 0, result.output
        assert result.output.strip() == (
            "day: 2025-01-14T17:00:00+00:00 -> 2025-01-15T05:30:00+00:00"
        )

    def test_night(self, runner):
        result = runner.invoke(cli.main, ["window", "night", "-d", "2025-01-15"])
        assert "2025-01-15T05:00:00+00:00 -> 2025-01-15T17:30:00+00:00" in result.output

    @pytest.mark.parametrize("shift", ["off", "fullday"])
    def test_unrestricted(self, runner, shift):
        result = runner.invoke(cli.main, ["window", shift, "-d", "2025-01-15"])
        assert result.exit_code == 0
        assert "no sleep window" in result.output

    def test_bad_tz(self, runner):
        result = runner.invoke(cli.main, ["window", "day", "-d", "2025-01-15", "--tz", "Mars/Base"])
        assert result.exit_code == 2


class TestHoursMinutes:
    @pytest.mark.parametrize(
        "seconds, expected",
        [
            (0, "0h 0m"),
            (3599, "1h 0m"),
            (3600, "1h 0m"),
            (5400, "1h 30m"),
            (6.5 * 3600, "6h 30m"),
            (7199, "2h 0m"),
        ],
    )
    def test_format(self, seconds, expected):
        assert cli._hm(seconds) == expected
