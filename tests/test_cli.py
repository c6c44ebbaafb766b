# File: tests/test_cli.py
"""Тесты для CLI (`icon_scout.cli`) с использованием click.testing.CliRunner.
Проверяют команды `resolve`, `slug`, `config`, `--version`, а также обработку ошибок.
"""
import inspect
import json
from pathlib import Path

import pytest
from click.testing import CliRunner

import icon_scout.cli as cli_module
from icon_scout.cli import cli
from icon_scout.errors import ConversionFailed, NoFaviconFound
from icon_scout.logger import configure, logger
from icon_scout.models import CandidateOrigin, DownloadedAsset, FaviconCandidate, ResolvedIcon


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Без configs/default.yaml в рабочем каталоге берутся значения по умолчанию."""
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def reset_logging():
    """CLI перенастраивает логгер на потоки CliRunner; после теста возвращаем обычные настройки."""
    yield
    configure()


@pytest.fixture()
def fake_engine(monkeypatch):
    """Патчим Engine, чтобы resolve не ходил в сеть."""
    calls = []

    class DummyEngine:
        def __init__(self, config):
            self.config = config

        def run(self, url, user_icon=None, output=None, size=None, convert=True):
            calls.append({"url": url, "user_icon": user_icon, "output": output, "size": size, "convert": convert})
            cand = FaviconCandidate("https://example.com/apple-touch-icon.png", CandidateOrigin.HTML_LINK, "png")
            asset = DownloadedAsset(Path("/tmp/favicon-01.png"), 1234, (180, 180))
            return ResolvedIcon(asset, cand), Path(output) if output else None

    monkeypatch.setattr(cli_module, "Engine", DummyEngine)
    return calls


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "IconScout" in result.output


def test_slug_command():
    runner = CliRunner()
    result = runner.invoke(cli, ["slug", "https://WWW.Example.com/path?q=1"])
    assert result.exit_code == 0
    assert result.output.strip() == "example-com"


def test_slug_invalid_url():
    runner = CliRunner()
    result = runner.invoke(cli, ["slug", "not a url"])
    assert result.exit_code == 1


def test_show_config(tmp_path):
    cfg_file = tmp_path / "custom.json"
    cfg_file.write_text(json.dumps({"min_icon_size": 96, "aggregator_url": None}), encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["min_icon_size"] == 96
    assert data["aggregator_url"] is None
    assert data["timeout"] == 30


def test_bad_config_exits_with_error(tmp_path):
    cfg_file = tmp_path / "bad.yaml"
    cfg_file.write_text("timeout: -5", encoding="utf-8")
    runner = CliRunner()
    result = runner.invoke(cli, ["--config", str(cfg_file), "config"])
    assert result.exit_code == 1


def test_resolve_prints_candidate(fake_engine, tmp_path):
    runner = CliRunner()
    out = tmp_path / "icon.png"
    report = tmp_path / "report.json"
    result = runner.invoke(
        cli, ["resolve", "https://example.com", "--output", str(out), "--size", "64", "--json", str(report)]
    )
    assert result.exit_code == 0, result.output
    assert "html-link\thttps://example.com/apple-touch-icon.png" in result.output
    assert fake_engine == [
        {"url": "https://example.com", "user_icon": None, "output": out, "size": 64, "convert": True}
    ]

    data = json.loads(report.read_text(encoding="utf-8"))
    assert data["slug"] == "example-com"
    assert data["origin"] == "html-link"
    assert data["dimension"] == [180, 180]
    assert data["output"] == str(out)


def test_resolve_with_custom_icon_and_no_convert(fake_engine, tmp_path):
    icon = tmp_path / "mine.png"
    icon.write_bytes(b"x")
    runner = CliRunner()
    result = runner.invoke(cli, ["resolve", "https://example.com", str(icon), "--no-convert"])
    assert result.exit_code == 0
    assert fake_engine[0]["user_icon"] == icon
    assert fake_engine[0]["convert"] is False


def test_resolve_failure_exits_nonzero(monkeypatch):
    class FailingEngine:
        def __init__(self, config):
            pass

        def run(self, url, **kwargs):
            raise NoFaviconFound(url, [("well-known-path", f"{url}/favicon.ico", "unreachable")])

    monkeypatch.setattr(cli_module, "Engine", FailingEngine)
    runner = CliRunner()
    result = runner.invoke(cli, ["resolve", "https://example.org"])
    assert result.exit_code == 1
    assert "no favicon found" in result.output
    assert "favicon.ico" in result.output


def test_resolve_invalid_url(fake_engine):
    runner = CliRunner()
    result = runner.invoke(cli, ["resolve", "ftp://example.org"])
    assert result.exit_code == 1
    assert fake_engine == []


def test_cli_submodule_is_not_shadowed_by_group():
    # the package must not re-export the group under the submodule's name
    assert inspect.ismodule(cli_module)
    assert cli_module.cli is cli


def test_debug_keeps_log_file_handler(monkeypatch, tmp_path):
    class ChattyEngine:
        def __init__(self, config):
            pass

        def run(self, url, **kwargs):
            logger.debug("engine detail for %s", url)
            cand = FaviconCandidate("https://example.com/favicon.png", CandidateOrigin.WELL_KNOWN_PATH, "png")
            return ResolvedIcon(DownloadedAsset(Path("/tmp/favicon-01.png"), 10, (128, 128)), cand), None

    monkeypatch.setattr(cli_module, "Engine", ChattyEngine)
    log_file = tmp_path / "run.log"
    runner = CliRunner()
    args = ["--log-file", str(log_file), "--log-format", "%(levelname)s::%(message)s"]
    result = runner.invoke(cli, args + ["resolve", "https://example.com", "--debug"])
    assert result.exit_code == 0, result.output
    assert "DEBUG::engine detail for https://example.com" in log_file.read_text(encoding="utf-8")


def test_delivery_failure_is_reported(monkeypatch, tmp_path):
    class BrokenOutputEngine:
        def __init__(self, config):
            pass

        def run(self, url, **kwargs):
            raise ConversionFailed("cannot write icon: Not a directory", url=str(kwargs["output"]))

    monkeypatch.setattr(cli_module, "Engine", BrokenOutputEngine)
    runner = CliRunner()
    result = runner.invoke(cli, ["resolve", "https://example.com", "-o", str(tmp_path / "file" / "out.png")])
    assert result.exit_code == 1
    assert "cannot write icon" in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)
