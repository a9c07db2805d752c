"""
Tests for the summary_report command line tool.
"""

import pandas as pd
import pytest

from roadwatch.cli.summary_report import build_parser, main


@pytest.fixture
def csv_path(tmp_path):
    path = tmp_path / "accidents.csv"
    pd.DataFrame(
        {
            "ID": ["A-1", "A-2", "A-3", "A-4"],
            "Severity": [2, 4, 1, 3],
            "Start_Time": [
                "2021-01-05 08:30:00",
                "2021-01-05 22:10:00",
                "2021-02-01 09:00:00",
                "2021-03-02 17:20:00",
            ],
            "State": ["CA", "CA", "TX", "NY"],
            "Weather_Condition": ["Clear", "Rain", "Clear", "Snow"],
            "Temperature(F)": [55.0, 48.0, 70.0, 20.0],
            "Humidity(%)": [40.0, 90.0, 30.0, 75.0],
        }
    ).to_csv(path, index=False)
    return path


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args(["data.csv"])

        assert args.data_file == "data.csv"
        assert args.weather == []
        assert args.region == []
        assert args.metric == "count"
        assert args.group_by == "region"

    def test_rejects_unknown_preset(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["data.csv", "--preset", "Region 99"])


class TestMain:
    def test_national_report(self, csv_path, capsys):
        assert main([str(csv_path)]) == 0

        out = capsys.readouterr().out
        assert "NATIONAL VIEW (ALL STATES)" in out
        assert "4 accidents" in out
        assert "BUSIEST STATES" in out
        assert "DAILY TRENDS (Total Accidents)" in out

    def test_region_selection(self, csv_path, capsys):
        assert main([str(csv_path), "--region", "ca"]) == 0

        out = capsys.readouterr().out
        assert "CUSTOM SELECTION" in out
        assert "1 State Selected" in out
        assert "50.0% of 4" in out

    def test_preset_and_weather(self, csv_path, capsys):
        assert main([str(csv_path), "--preset", "Region 9", "--weather", "Clear"]) == 0

        out = capsys.readouterr().out
        assert "REGION 9" in out
        assert "1 accidents" in out

    def test_date_range(self, csv_path, capsys):
        assert main([str(csv_path), "--start", "2021-02-01", "--metric", "severity_avg"]) == 0

        out = capsys.readouterr().out
        assert "2 accidents" in out
        assert "Average Severity (1-4)" in out

    def test_no_records(self, tmp_path, capsys):
        path = tmp_path / "empty.csv"
        path.write_text("ID,Severity,Start_Time,State\n")

        assert main([str(path)]) == 1
        assert "No usable records" in capsys.readouterr().out
