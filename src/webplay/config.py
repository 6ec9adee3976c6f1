"""Runner configuration: defaults, overridable from the environment and CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from webplay.errors import PlaybookError
from webplay.parser import Syntax

_TRUE = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in _TRUE


@dataclass
class RunnerConfig:
    """Configuration for one playbook run."""

    playbook: str = "-"  # "-" reads stdin
    report_path: str = "report.xml"
    debug: bool = False
    proxy: str = ""
    syntax: Syntax = Syntax.LITERAL
    strict: bool = False  # unknown action kinds are fatal
    debug_pause: float = 10.0  # seconds to keep the browser open after a failure in debug mode
    diagnostic_screenshot: str = "fatal.png"

    @property
    def headless(self) -> bool:
        return not self.debug

    @property
    def suite_name(self) -> str:
        if self.playbook == "-":
            return "stdin"
        return str(Path(self.playbook))

    @classmethod
    def from_env(cls) -> "RunnerConfig":
        """Build a config from ``WEBPLAY_*`` environment variables."""
        config = cls()
        config.playbook = os.getenv("WEBPLAY_PLAYBOOK", config.playbook)
        config.report_path = os.getenv("WEBPLAY_REPORT", config.report_path)
        config.debug = _env_flag("WEBPLAY_DEBUG", config.debug)
        config.proxy = os.getenv("WEBPLAY_PROXY", config.proxy)
        syntax = os.getenv("WEBPLAY_SYNTAX", config.syntax.value).strip().lower()
        choices = [s.value for s in Syntax]
        if syntax not in choices:
            raise PlaybookError(
                f"invalid WEBPLAY_SYNTAX {syntax!r} (choose from {', '.join(choices)})"
            )
        config.syntax = Syntax(syntax)
        config.strict = _env_flag("WEBPLAY_STRICT", config.strict)
        config.diagnostic_screenshot = os.getenv(
            "WEBPLAY_DIAGNOSTIC_SCREENSHOT", config.diagnostic_screenshot
        )
        return config
