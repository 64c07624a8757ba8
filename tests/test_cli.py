"""
Tests for the command-line entry point.
"""

import json

import pytest

from trustscan import __main__ as cli
from trustscan.report import ReportAssembler


class StubCoordinator:

    def __init__(self, config, settings, use_cache=True):
        self.config = config
        self.use_cache = use_cache
        self.from_cache = False

    def set_progress_callback(self, callback):
        callback(1, self.config.start_url, {})

    async def run(self):
        return ReportAssembler(self.config.start_url).assemble([], [])


@pytest.fixture
def stub_coordinator(monkeypatch):
    monkeypatch.setattr("trustscan.coordinator.ScanCoordinator", StubCoordinator)


def test_invalid_url_exits_1(capsys):
    assert cli.main(["scan", "https://example.comhttps://example.com"]) == 1
    assert "doubly concatenated" in capsys.readouterr().err


def test_bad_limits_rejected_by_parser():
    with pytest.raises(SystemExit):
        cli.main(["scan", "example.com", "--max-pages", "0"])


def test_scan_writes_all_formats(tmp_path, stub_coordinator, capsys):
    code = cli.main(["scan", "example.com", "--output", str(tmp_path), "--format", "all", "--no-cache"])
    assert code == 0
    assert (tmp_path / "example_com.md").exists()
    assert (tmp_path / "example_com.docx").exists()
    data = json.loads((tmp_path / "example_com.json").read_text(encoding="utf-8"))
    assert data["startUrl"] == "https://example.com"
    assert "SCAN COMPLETE" in capsys.readouterr().out


def test_login_url_without_credentials_scans_anonymously(monkeypatch):
    monkeypatch.delenv("TRUSTSCAN_USERNAME", raising=False)
    monkeypatch.delenv("TRUSTSCAN_PASSWORD", raising=False)
    args = cli.build_parser().parse_args(["scan", "example.com", "--login-url", "https://example.com/login"])
    assert cli._auth_from_args(args) is None


def test_headless_flag_parsing():
    args = cli.build_parser().parse_args(["scan", "example.com", "--headless", "false"])
    assert args.headless is False
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["scan", "example.com", "--headless", "maybe"])
