"""Execution driver: feeds playbook lines to the parser and runs each action."""

from __future__ import annotations

import asyncio
import sys
import time
from pathlib import Path
from typing import Iterable, Iterator

from playwright.async_api import Error as PlaywrightError

from webplay.actions import ScreenshotAction
from webplay.errors import (
    ActionFailed,
    PlaybookError,
    PlaybookInputError,
    PlaybookSyntaxError,
    RunCancelled,
)
from webplay.parser import PARSERS, Step, Syntax
from webplay.registry import ActionRegistry, registry as default_registry
from webplay.report import Outcome, Suite
from webplay.session import BrowserSession

# Errors an action may raise while running. Anything else is a bug and
# propagates untouched.
EXECUTION_ERRORS = (PlaywrightError, asyncio.TimeoutError, PlaybookError, OSError)


def _read_lines(lines: Iterable[str]) -> Iterator[str]:
    """Yield lines, turning a decode failure into a playbook error."""
    it = iter(lines)
    while True:
        try:
            line = next(it)
        except StopIteration:
            return
        except UnicodeDecodeError as e:
            raise PlaybookInputError(f"playbook is not valid UTF-8: {e}") from e
        yield line


class Runner:
    """Runs a playbook against one browser session.

    Actions run strictly in order. The first failure stops the run after a
    best-effort diagnostic screenshot. The report is finalized exactly once
    whichever way the run ends.

    ``cancel`` is supplied by the caller and checked between actions; the
    command line never sets it.
    """

    def __init__(
        self,
        session: BrowserSession,
        suite: Suite | None = None,
        registry: ActionRegistry = default_registry,
        syntax: Syntax = Syntax.LITERAL,
        report_path: str | Path | None = None,
        cancel: asyncio.Event | None = None,
        diagnostic_screenshot: str = "fatal.png",
    ) -> None:
        self.session = session
        self.suite = suite if suite is not None else Suite()
        self.registry = registry
        self.syntax = Syntax(syntax)
        self.report_path = report_path
        self.cancel = cancel
        self.diagnostic_screenshot = diagnostic_screenshot
        self._finalized = False

    async def run(self, lines: Iterable[str]) -> Suite:
        """Execute every record in ``lines``. Returns the finalized suite."""
        try:
            await self._drive(lines)
        finally:
            self.finalize()
        return self.suite

    async def _drive(self, lines: Iterable[str]) -> None:
        parse_record = PARSERS[self.syntax]
        buffer = ""
        for line in _read_lines(lines):
            line = line.rstrip("\r\n")
            # Literal records may span lines; lines are joined with no separator.
            buffer = line if self.syntax is Syntax.LOGFMT else buffer + line
            step = parse_record(buffer, self.registry)
            if step is None:
                continue
            buffer = ""
            if self.cancel is not None and self.cancel.is_set():
                raise RunCancelled(f"run cancelled before {step}")
            await self.execute(step)

        if buffer.strip():
            raise PlaybookSyntaxError(f"unexpected end of playbook in record {buffer!r}")

    async def execute(self, step: Step) -> Outcome:
        """Run one step, record its outcome, and raise ActionFailed on failure."""
        # A malformed timeout is a configuration error, not a test failure.
        step.action.deadline()

        start = time.monotonic()
        try:
            await step.action.execute(self.session)
        except EXECUTION_ERRORS as e:
            secs = time.monotonic() - start
            reason = str(e) or f"timed out after {step.action.timeout}"
            self.suite.add(Outcome(
                classname=step.name,
                name=str(step.action),
                time=secs,
                success=False,
                error=reason,
                error_type=type(e).__name__,
            ))
            print(f"[runner] FAIL {step.action} {secs:.3f}s: {reason}", file=sys.stderr)
            await self._diagnose()
            raise ActionFailed(step, reason) from e

        secs = time.monotonic() - start
        outcome = Outcome(classname=step.name, name=str(step.action), time=secs)
        self.suite.add(outcome)
        print(f"[runner] {step.action} {secs:.3f}s", file=sys.stderr)
        return outcome

    async def _diagnose(self) -> None:
        """Capture a screenshot after a failure, ignoring its own errors."""
        if not self.diagnostic_screenshot:
            return
        shot = ScreenshotAction(timeout="10s", name=self.diagnostic_screenshot)
        try:
            await shot.execute(self.session)
        except EXECUTION_ERRORS as e:
            print(f"[runner] Diagnostic screenshot failed: {e}", file=sys.stderr)
        else:
            print(f"[runner] Diagnostic screenshot saved to {self.diagnostic_screenshot}", file=sys.stderr)

    def finalize(self) -> None:
        """Write the report. Safe to call more than once; only the first call writes."""
        if self._finalized:
            return
        self._finalized = True
        if self.report_path is not None:
            path = self.suite.write(self.report_path)
            print(f"[runner] Report written to {path}", file=sys.stderr)
