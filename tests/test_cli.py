"""Tests for cli and config modules."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from unittest.mock import AsyncMock, patch

import pytest
from playwright.async_api import Error as PlaywrightError

from webplay.cli import apply_args, build_parser, main, run_playbook
from webplay.config import RunnerConfig
from webplay.errors import PlaybookError
from webplay.parser import Syntax
from tests.conftest import LOGIN_PLAYBOOK, make_mock_session


def _session(text: str = ""):
    session = make_mock_session(text=text)
    session.__aenter__ = AsyncMock(return_value=session)
    session.__aexit__ = AsyncMock(return_value=False)
    return session


class TestRunnerConfig:
    def test_defaults(self):
        config = RunnerConfig()
        assert config.playbook == "-"
        assert config.report_path == "report.xml"
        assert config.headless is True
        assert config.syntax is Syntax.LITERAL
        assert config.suite_name == "stdin"

    def test_debug_is_headed(self):
        assert RunnerConfig(debug=True).headless is False

    def test_suite_name_from_path(self):
        assert RunnerConfig(playbook="tests/login.play").suite_name == "tests/login.play"

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("WEBPLAY_PLAYBOOK", "smoke.play")
        monkeypatch.setenv("WEBPLAY_DEBUG", "yes")
        monkeypatch.setenv("WEBPLAY_SYNTAX", "logfmt")
        monkeypatch.setenv("WEBPLAY_PROXY", "http://proxy:3128")
        config = RunnerConfig.from_env()
        assert config.playbook == "smoke.play"
        assert config.debug is True
        assert config.syntax is Syntax.LOGFMT
        assert config.proxy == "http://proxy:3128"
        assert config.strict is False

    def test_from_env_rejects_unknown_syntax(self, monkeypatch):
        monkeypatch.setenv("WEBPLAY_SYNTAX", "yaml")
        with pytest.raises(PlaybookError, match="WEBPLAY_SYNTAX .yaml."):
            RunnerConfig.from_env()

    def test_from_env_syntax_is_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("WEBPLAY_SYNTAX", "LogFmt")
        assert RunnerConfig.from_env().syntax is Syntax.LOGFMT


class TestArgs:
    def test_flags_override_config(self):
        args = build_parser().parse_args(
            ["--in", "a.play", "--debug", "--proxy", "http://p:1", "--report", "r.xml",
             "--syntax", "logfmt", "--strict"]
        )
        config = apply_args(RunnerConfig(), args)
        assert config.playbook == "a.play"
        assert config.debug is True
        assert config.proxy == "http://p:1"
        assert config.report_path == "r.xml"
        assert config.syntax is Syntax.LOGFMT
        assert config.strict is True

    def test_absent_flags_keep_config(self):
        base = RunnerConfig(playbook="env.play", debug=True)
        config = apply_args(base, build_parser().parse_args([]))
        assert config.playbook == "env.play"
        assert config.debug is True

    def test_rejects_unknown_syntax(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--syntax", "yaml"])


class TestRunPlaybook:
    def _config(self, tmp_path, text: str = LOGIN_PLAYBOOK, **kwargs) -> RunnerConfig:
        playbook = tmp_path / "login.play"
        playbook.write_text(text)
        return RunnerConfig(
            playbook=str(playbook),
            report_path=str(tmp_path / "report.xml"),
            diagnostic_screenshot=str(tmp_path / "fatal.png"),
            **kwargs,
        )

    @pytest.mark.asyncio
    async def test_clean_run_exits_zero(self, tmp_path):
        config = self._config(tmp_path)
        session = _session(text="Welcome")
        assert await run_playbook(config, session=session) == 0
        root = ET.parse(tmp_path / "report.xml").getroot()
        assert root.get("tests") == "5"
        assert root.get("name") == config.suite_name
        session.__aexit__.assert_called_once()

    @pytest.mark.asyncio
    async def test_failure_exits_one_and_writes_report(self, tmp_path, capsys):
        config = self._config(tmp_path)
        session = _session(text="Goodbye")
        assert await run_playbook(config, session=session) == 1
        root = ET.parse(tmp_path / "report.xml").getroot()
        assert root.get("tests") == "5"
        assert root.get("failures") == "1"
        assert "compare" in capsys.readouterr().err
        session.__aexit__.assert_called_once()

    @pytest.mark.asyncio
    async def test_parse_error_exits_one(self, tmp_path):
        config = self._config(tmp_path, text="click{selector:42}\n")
        assert await run_playbook(config, session=_session()) == 1
        assert ET.parse(tmp_path / "report.xml").getroot().get("tests") == "0"

    @pytest.mark.asyncio
    async def test_invalid_utf8_playbook_exits_one(self, tmp_path, capsys):
        config = self._config(tmp_path)
        (tmp_path / "login.play").write_bytes(b'click{selector:"#go"}\n\xff\xfe\n')
        session = _session()
        assert await run_playbook(config, session=session) == 1
        assert ET.parse(tmp_path / "report.xml").getroot().get("failures") == "0"
        assert "not valid UTF-8" in capsys.readouterr().err
        session.__aexit__.assert_called_once()

    @pytest.mark.asyncio
    async def test_missing_playbook_exits_one(self, tmp_path):
        config = RunnerConfig(
            playbook=str(tmp_path / "missing.play"),
            report_path=str(tmp_path / "report.xml"),
        )
        assert await run_playbook(config, session=_session()) == 1
        assert ET.parse(tmp_path / "report.xml").getroot().get("tests") == "0"

    @pytest.mark.asyncio
    async def test_browser_launch_failure_exits_one(self, tmp_path):
        config = self._config(tmp_path)
        session = _session()
        session.__aenter__ = AsyncMock(side_effect=PlaywrightError("Executable doesn't exist"))
        assert await run_playbook(config, session=session) == 1
        assert (tmp_path / "report.xml").exists()

    @pytest.mark.asyncio
    async def test_debug_pauses_before_fatal_exit(self, tmp_path, capsys):
        config = self._config(tmp_path, text="click{selector:42}\n", debug=True)
        config.debug_pause = 0.0
        assert await run_playbook(config, session=_session()) == 1
        assert "Pausing" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_no_pause_without_debug(self, tmp_path, capsys):
        config = self._config(tmp_path, text="click{selector:42}\n")
        assert await run_playbook(config, session=_session()) == 1
        assert "Pausing" not in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_strict_flag(self, tmp_path):
        config = self._config(tmp_path, text="hover{}\n", strict=True)
        assert await run_playbook(config, session=_session()) == 1

    @pytest.mark.asyncio
    async def test_logfmt_syntax(self, tmp_path):
        config = self._config(tmp_path, text="click selector=#go\n", syntax=Syntax.LOGFMT)
        session = _session()
        assert await run_playbook(config, session=session) == 0
        session.click.assert_called_once()


class TestMain:
    def test_main_builds_session_from_flags(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (tmp_path / "p.play").write_text("noop{}\n")
        captured = {}

        async def fake_run(config, session=None):
            captured["config"] = config
            return 0

        with patch("webplay.cli.run_playbook", new=fake_run):
            assert main(["--in", "p.play", "--proxy", "http://p:1"]) == 0
        assert captured["config"].playbook == "p.play"
        assert captured["config"].proxy == "http://p:1"

    def test_main_rejects_unknown_env_syntax(self, tmp_path, monkeypatch, capsys):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("WEBPLAY_SYNTAX", "yaml")
        with pytest.raises(SystemExit) as exc:
            main(["--in", "p.play"])
        assert exc.value.code == 2
        assert "invalid WEBPLAY_SYNTAX" in capsys.readouterr().err
