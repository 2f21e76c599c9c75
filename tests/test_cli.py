"""
CLI tests: ``apibench run`` exit codes, file inputs and output formats.

The run pipeline is wrapped with a mock transport so no request leaves the
process. Reports are read back from ``--output-file`` output under a temp dir.
"""

import functools
import json

import httpx
import pytest
import yaml
from typer.testing import CliRunner

from apibench import cli
from apibench.runner import run_benchmark_sync

from conftest import Recorder

runner = CliRunner()
URL = "http://bench.test/items"


@pytest.fixture
def mock_network(monkeypatch, recorder, tmp_path):
    monkeypatch.chdir(tmp_path)
    transport = httpx.MockTransport(recorder)
    monkeypatch.setattr(
        cli, "run_benchmark_sync", functools.partial(run_benchmark_sync, transport=transport)
    )
    return recorder


def _invoke(*args: str):
    return runner.invoke(cli.app, ["run", "--url", URL, *args])


def test_json_report_written(mock_network, tmp_path):
    result = _invoke("-n", "3", "--parallel", "-o", "json", "--output-file")
    assert result.exit_code == 0, result.output
    report = json.loads((tmp_path / "apibench-results.json").read_text())
    assert [r["iteration"] for r in report["results"]] == [1, 2, 3]
    assert report["statistics"]["successful"] == 3
    assert "checks" not in report


def test_yaml_report_written(mock_network, tmp_path):
    result = _invoke("-n", "2", "-o", "yaml", "--output-file")
    assert result.exit_code == 0, result.output
    report = yaml.safe_load((tmp_path / "apibench-results.yaml").read_text())
    assert report["statistics"]["total"] == 2


def test_csv_files_written(mock_network, tmp_path):
    result = _invoke("-n", "2", "-o", "csv", "--output-file")
    assert result.exit_code == 0, result.output
    assert "CSV files written to" in result.output
    assert (tmp_path / "apibench-results.csv").exists()
    assert (tmp_path / "apibench-results-stats.csv").exists()


def test_table_output_with_checks(mock_network):
    result = _invoke("-n", "4", "--check", "mean=100000,pctOfSuccess=100", "--no-chart")
    assert result.exit_code == 0, result.output
    assert "Total Requests" in result.output
    assert "pctOfSuccess" in result.output
    assert "PASS" in result.output
    assert "FAIL" not in result.output


def test_failed_check_exits_non_zero(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    transport = httpx.MockTransport(Recorder(status=503))
    monkeypatch.setattr(
        cli, "run_benchmark_sync", functools.partial(run_benchmark_sync, transport=transport)
    )
    result = _invoke("-n", "2", "-c", "pctOfSuccess=90")
    assert result.exit_code == 1
    assert "FAIL" in result.output


def test_no_checks_exits_zero_even_when_requests_fail(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    transport = httpx.MockTransport(Recorder(status=500))
    monkeypatch.setattr(
        cli, "run_benchmark_sync", functools.partial(run_benchmark_sync, transport=transport)
    )
    assert _invoke("-n", "2").exit_code == 0


def test_headers_and_data_files(mock_network, fixtures_dir):
    result = _invoke(
        "-n",
        "1",
        "--method",
        "post",
        "--headers-path",
        str(fixtures_dir / "headers.json"),
        "--data-path",
        str(fixtures_dir / "payload.json"),
    )
    assert result.exit_code == 0, result.output
    sent = mock_network.requests[0]
    assert sent.method == "POST"
    assert sent.headers["authorization"] == "Bearer secret-token"
    assert json.loads(sent.content) == {"name": "widget", "tags": ["a", "b"], "price": 9.5}


@pytest.mark.parametrize(
    "args",
    [
        ("-n", "0"),
        ("-n", "-5"),
        ("--method", "FETCH"),
        ("--headers-path", "does-not-exist.json"),
    ],
)
def test_configuration_errors_exit_before_sending(args, mock_network):
    result = _invoke(*args)
    assert result.exit_code == 1
    assert mock_network.requests == []


def test_invalid_json_file(mock_network, fixtures_dir):
    result = _invoke("--data-path", str(fixtures_dir / "broken.json"))
    assert result.exit_code == 1
    assert mock_network.requests == []


def test_split_checks():
    assert cli._split_checks(["mean=1,median=2", " q95=3 ", ""]) == ["mean=1", "median=2", "q95=3"]
    assert cli._split_checks(None) == []


def test_non_utf8_json_file(mock_network, tmp_path):
    data = tmp_path / "latin1.json"
    data.write_bytes(b"\xff\xfe{")
    result = _invoke("--data-path", str(data))
    assert result.exit_code == 1
    assert mock_network.requests == []
