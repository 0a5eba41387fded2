from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from efe_importer import main as cli
from efe_importer.errors import NetworkError
from efe_importer.orchestrator import RefreshResult
from efe_importer.output import ArticleCollection
from efe_importer.utils.config_loader import load_settings
from efe_importer.utils.notices import Notices


@pytest.fixture(autouse=True)
def _log_to_file(monkeypatch, tmp_path):
    monkeypatch.setenv("LOG_OUTPUT", "file")
    monkeypatch.setenv("LOG_FILE_PATH", str(tmp_path / "logs" / "efe.log"))
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def config(tmp_path):
    path = tmp_path / "efe.yaml"
    path.write_text(
        "client_id: client\nclient_secret: secret\nproduct_id: 42\nis_enabled: false\n"
        f"uploads_dir: {tmp_path / 'uploads'}\n",
        encoding="utf-8",
    )
    return path


class TestParseArgs:
    def test_defaults(self):
        args = cli.parse_args([])
        assert args.feed_format == "rss"
        assert not args.dry_run
        assert args.config is None

    def test_enable_and_disable_are_exclusive(self):
        with pytest.raises(SystemExit):
            cli.parse_args(["--enable", "--disable"])


class TestMain:
    def test_enable(self, config, capsys):
        assert cli.main(["--config", str(config), "--enable"]) == 0
        assert "enabled" in capsys.readouterr().out
        assert load_settings(config).get("is_enabled") is True

    def test_enable_without_credentials_fails(self, tmp_path, capsys):
        assert cli.main(["--config", str(tmp_path / "empty.yaml"), "--enable"]) == 1
        assert "missing configuration options" in capsys.readouterr().err

    def test_invalid_settings_file(self, tmp_path, capsys):
        path = tmp_path / "efe.yaml"
        path.write_text("is_enabled: maybe\n", encoding="utf-8")
        assert cli.main(["--config", str(path)]) == 1
        assert "is_enabled" in capsys.readouterr().err

    def test_show_notices(self, config, capsys):
        Notices(load_settings(config)).add("EFE is down", "refresh-error")
        assert cli.main(["--config", str(config), "--show-notices"]) == 0
        assert "[error] EFE is down" in capsys.readouterr().out

    def test_run_failure_exit_code(self, config, capsys):
        with patch.object(cli, "Refresher") as refresher:
            refresher.return_value.run.return_value = RefreshResult(error=NetworkError("no route"))
            assert cli.main(["--config", str(config)]) == 1
        assert "no route" in capsys.readouterr().err

    def test_dry_run_prints_document(self, config, capsys):
        with patch.object(cli, "Refresher") as refresher:
            refresher.return_value.run.return_value = RefreshResult(
                collection=ArticleCollection(), document="<rss/>"
            )
            assert cli.main(["--config", str(config), "--dry-run", "--stdout", "--format", "atom"]) == 0

        _, kwargs = refresher.call_args
        assert kwargs == {"dry_run": True, "feed_format": "atom"}
        assert capsys.readouterr().out == "<rss/>"
