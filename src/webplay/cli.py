"""Command line: webplay --in playbook.txt [--debug] [--proxy URL]"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import sys
from typing import Iterator, Sequence, TextIO

from dotenv import load_dotenv
from playwright.async_api import Error as PlaywrightError

from webplay.config import RunnerConfig
from webplay.errors import PlaybookError
from webplay.parser import Syntax
from webplay.registry import registry as default_registry
from webplay.report import Suite
from webplay.runner import Runner
from webplay.session import BrowserSession


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Scripted browser test runner")
    parser.add_argument(
        "--in", dest="playbook", default=None, help="Browser test playbook ('-' for stdin)"
    )
    parser.add_argument(
        "--debug", action="store_true", default=None,
        help="Run with visible browser and pause before a fatal exit",
    )
    parser.add_argument("--proxy", default=None, help="HTTP proxy to use")
    parser.add_argument("--report", dest="report_path", default=None, help="Report file")
    parser.add_argument(
        "--syntax", choices=[s.value for s in Syntax], default=None, help="Playbook syntax"
    )
    parser.add_argument(
        "--strict", action="store_true", default=None, help="Fail on unknown action kinds"
    )
    return parser


def apply_args(config: RunnerConfig, args: argparse.Namespace) -> RunnerConfig:
    """Override ``config`` with every flag given on the command line."""
    for name in ("playbook", "debug", "proxy", "report_path", "strict"):
        value = getattr(args, name)
        if value is not None:
            setattr(config, name, value)
    if args.syntax is not None:
        config.syntax = Syntax(args.syntax)
    return config


@contextlib.contextmanager
def open_playbook(path: str) -> Iterator[TextIO]:
    if path == "-":
        yield sys.stdin
        return
    with open(path, encoding="utf-8") as fh:
        yield fh


async def run_playbook(config: RunnerConfig, session: BrowserSession | None = None) -> int:
    """Run the configured playbook. Returns the process exit code."""
    if session is None:
        session = BrowserSession(headless=config.headless, proxy=config.proxy)
    runner = Runner(
        session,
        suite=Suite(name=config.suite_name),
        registry=default_registry.copy(strict=config.strict),
        syntax=config.syntax,
        report_path=config.report_path,
        diagnostic_screenshot=config.diagnostic_screenshot,
    )

    try:
        async with session:
            try:
                with open_playbook(config.playbook) as lines:
                    await runner.run(lines)
            except (PlaybookError, OSError):
                if config.debug:
                    print(f"[cli] Pausing {config.debug_pause:.0f}s before exit", file=sys.stderr)
                    await asyncio.sleep(config.debug_pause)
                raise
    except (PlaybookError, OSError, PlaywrightError) as e:
        print(f"[cli] {e}", file=sys.stderr)
        return 1
    finally:
        runner.finalize()
        runner.suite.print_report()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = RunnerConfig.from_env()
    except PlaybookError as e:
        parser.error(str(e))
    return asyncio.run(run_playbook(apply_args(config, args)))


def entrypoint() -> None:
    sys.exit(main())


if __name__ == "__main__":
    entrypoint()
