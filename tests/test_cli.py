"""Тесты для CLI (`site_snapshot.cli`) с использованием click.testing.CliRunner.
Проверяют команды `crawl`, `config`, `--version`, а также коды выхода при ошибках.
"""
import json
from pathlib import Path

import pytest
from click.testing import CliRunner

import site_snapshot.cli as cli_module
from site_snapshot.aggregator import aggregate_results
from site_snapshot.cli import cli
from site_snapshot.crawler.models import ERROR_STATUS, PageResult
from site_snapshot.crawler.snapshot import SnapshotError
from site_snapshot.crawler.urls import MalformedURL


@pytest.fixture(autouse=True)
def patch_start_crawl(monkeypatch):
    """Патчим start_crawl: фиктивный отчёт без обхода, запоминаем конфиг."""
    seen = {}

    async def fake_crawl(cfg):
        seen["config"] = cfg
        results = [
            PageResult("http://example.com/", "/", 200, content_type="text/html", saved=True),
            PageResult("http://example.com/gone", "/gone", 404, skipped="HTTP 404"),
            PageResult("http://example.com/down", "/down", ERROR_STATUS, error="ClientConnectorError: refused"),
        ]
        report = aggregate_results(results, "http://example.com/", cfg.output_dir)
        report.manifest_path = Path(cfg.output_dir) / "manifest.json"
        return report

    monkeypatch.setattr(cli_module, "start_crawl", fake_crawl)
    return seen


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "SiteSnapshot" in result.output


def test_crawl_prints_summary(tmp_path, patch_start_crawl):
    runner = CliRunner()
    result = runner.invoke(cli, ["crawl", "https://example.com", str(tmp_path / "out"), "--mode", "raw"])

    assert result.exit_code == 0, result.output
    assert "Crawled 3 pages, saved 1." in result.output
    assert "  ERROR: 1" in result.output
    cfg = patch_start_crawl["config"]
    assert cfg.mode == "raw"
    assert cfg.output_dir == tmp_path / "out"


def test_crawl_default_output_dir(patch_start_crawl):
    runner = CliRunner()
    result = runner.invoke(cli, ["crawl", "https://example.com"])
    assert result.exit_code == 0
    assert patch_start_crawl["config"].output_dir == Path("snapshots-baseline")
    assert patch_start_crawl["config"].mode == "rendered"


def test_crawl_listing(tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli, ["crawl", "https://example.com", str(tmp_path), "--list"])
    assert result.exit_code == 0
    assert "# Site Crawl Results" in result.output
    assert "404 /gone" in result.output


def test_crawl_html_report(tmp_path):
    out = tmp_path / "report.html"
    runner = CliRunner()
    result = runner.invoke(cli, ["crawl", "https://example.com", str(tmp_path), "--html", str(out)])
    assert result.exit_code == 0
    assert out.exists()
    assert f"HTML report: {out}" in result.output


def test_crawl_uses_config_file(tmp_path, patch_start_crawl):
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(
        json.dumps({"base_url": "https://example.com", "mode": "raw", "timeout": 3, "pretty_html": True}),
        encoding="utf-8",
    )
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "crawl", "--timeout", "4"])

    assert result.exit_code == 0, result.output
    cfg = patch_start_crawl["config"]
    assert cfg.timeout == 4
    assert cfg.pretty_html is True


def test_crawl_without_url_fails():
    runner = CliRunner()
    result = runner.invoke(cli, ["crawl"])
    assert result.exit_code == 1
    assert "Ошибка загрузки конфигурации" in result.output


def test_crawl_invalid_url_fails():
    runner = CliRunner()
    result = runner.invoke(cli, ["crawl", "not-a-url"])
    assert result.exit_code == 1


@pytest.mark.parametrize(
    "error,message",
    [
        (MalformedURL("http://[::1"), "Некорректный стартовый URL"),
        (SnapshotError("Cannot create out/html: Permission denied"), "Ошибка записи снимков"),
        (RuntimeError("browser crashed"), "Ошибка при обходе"),
    ],
)
def test_fatal_errors_exit_non_zero(monkeypatch, error, message):
    async def failing(cfg):
        raise error

    monkeypatch.setattr(cli_module, "start_crawl", failing)
    runner = CliRunner()
    result = runner.invoke(cli, ["crawl", "https://example.com"])
    assert result.exit_code == 1
    assert message in result.output


def test_show_config(tmp_path):
    cfg_file = tmp_path / "default.yaml"
    cfg_file.write_text("base_url: https://example.com\nmode: raw\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["base_url"].startswith("https://example.com")
    assert data["mode"] == "raw"
    assert data["timeout"] is None
