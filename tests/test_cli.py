# File: tests/test_cli.py
"""Тесты для CLI (`docs_mirror.cli`) с использованием click.testing.CliRunner.
Проверяют команды `mirror`, `config`, `--version`, а также обработку ошибок.
"""
import json

import pytest
from click.testing import CliRunner

import docs_mirror.cli as cli_module
from docs_mirror.cli import cli
from docs_mirror.crawler.mirror import MirrorReport
from docs_mirror.crawler.models import WalkError, WalkErrorKind, WalkResult
from docs_mirror.errors import RootSitemapError

DUMMY_REPORT = MirrorReport(
    root="https://docs.example.com/sitemap_index.xml",
    sitemaps=3,
    queued=4,
    skipped=2,
    failed_branches=0,
    stored=4,
    bytes_written=400,
    fetch_failures=0,
    store_failures=0,
    duration=0.5,
)


@pytest.fixture(autouse=True)
def patch_start_mirror(monkeypatch):
    """Патчим start_mirror, чтобы не ходить в сеть; запоминаем полученный конфиг."""
    seen = {}

    async def fake_mirror(cfg):
        seen["config"] = cfg
        return DUMMY_REPORT

    monkeypatch.setattr(cli_module, "start_mirror", fake_mirror)
    return seen


@pytest.fixture()
def cfg_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "sitemap_url: https://docs.example.com/sitemap_index.xml\nhost: docs.example.com\nworkers: 3\n",
        encoding="utf-8",
    )
    return path


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "docs-mirror" in result.output


def test_show_config(cfg_file):
    runner = CliRunner()
    result = runner.invoke(cli, ["--log-level", "ERROR", "--config", str(cfg_file), "config"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["sitemap_url"] == "https://docs.example.com/sitemap_index.xml"
    assert data["workers"] == 3


def test_mirror_applies_overrides(cfg_file, tmp_path, patch_start_mirror):
    runner = CliRunner()
    result = runner.invoke(
        cli,
        [
            "--log-level", "ERROR", "--config", str(cfg_file),
            "mirror", "--workers", "2", "--test", "5", "--rate-limit", "--output-dir", str(tmp_path / "out"),
        ],
    )
    assert result.exit_code == 0, result.output
    cfg = patch_start_mirror["config"]
    assert cfg.workers == 2
    assert cfg.max_docs == 5
    assert cfg.rate_limit is True
    assert cfg.base_dir == tmp_path / "out"
    assert "Stored 4 pages" in result.output


def test_mirror_without_flags_keeps_config(cfg_file, patch_start_mirror):
    runner = CliRunner()
    result = runner.invoke(cli, ["--log-level", "ERROR", "--config", str(cfg_file), "mirror"])
    assert result.exit_code == 0
    cfg = patch_start_mirror["config"]
    assert cfg.workers == 3
    assert cfg.max_docs == 0
    assert cfg.rate_limit is False


def test_mirror_json_report(cfg_file, tmp_path):
    out = tmp_path / "reports" / "run.json"
    runner = CliRunner()
    result = runner.invoke(cli, ["--log-level", "ERROR", "--config", str(cfg_file), "mirror", "--json", str(out)])
    assert result.exit_code == 0
    assert out.exists()
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["stored"] == 4


def test_root_sitemap_error_exits_nonzero(cfg_file, monkeypatch):
    async def failing(cfg):
        raise RootSitemapError(
            WalkResult(str(cfg.sitemap_url), error=WalkError(WalkErrorKind.FETCH_FAILED, "HTTP 500"))
        )

    monkeypatch.setattr(cli_module, "start_mirror", failing)
    runner = CliRunner()
    result = runner.invoke(cli, ["--log-level", "ERROR", "--config", str(cfg_file), "mirror"])
    assert result.exit_code == 1
    assert "HTTP 500" in result.output


def test_log_file_is_written(cfg_file, tmp_path):
    log_file = tmp_path / "mirror.log"
    runner = CliRunner()
    result = runner.invoke(
        cli, ["--log-level", "DEBUG", "--logfile", str(log_file), "--config", str(cfg_file), "config"]
    )
    assert result.exit_code == 0
    assert log_file.exists()


def test_bad_config_exits_nonzero(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("workers: 0\n", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(bad), "config"])
    assert result.exit_code == 1
