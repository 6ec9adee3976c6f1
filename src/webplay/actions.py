"""Action dataclasses: one per playbook kind.

Every action is a flat record of string fields. ``timeout`` is a duration
string bounding the whole action; the remaining fields are a CSS selector
and/or a literal value depending on the kind.
"""

from __future__ import annotations

import asyncio
import functools
import json
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar

from playwright.async_api import Error as PlaywrightError

from webplay.durations import parse_duration
from webplay.errors import ComparisonError, UnknownFieldError

if TYPE_CHECKING:
    from webplay.session import BrowserSession


def _q(s: str) -> str:
    return json.dumps(s, ensure_ascii=False)


@dataclass
class Action:
    """Base action. Does nothing; subclasses override ``perform``."""

    kind: ClassVar[str] = "noop"

    timeout: str = "60s"

    def __str__(self) -> str:
        return self.kind

    @classmethod
    @functools.cache
    def field_table(cls) -> dict[str, str]:
        """Lowercased field name -> attribute name."""
        return {f.name.lower(): f.name for f in fields(cls)}

    def set_field(self, name: str, value: str) -> None:
        attr = self.field_table().get(name.lower())
        if attr is None:
            raise UnknownFieldError(self, name, value)
        setattr(self, attr, value)

    def deadline(self) -> float:
        """Timeout in seconds. Raises DurationError if malformed."""
        return parse_duration(self.timeout)

    async def execute(self, session: BrowserSession) -> None:
        seconds = self.deadline()
        await asyncio.wait_for(self.perform(session, seconds * 1000), timeout=seconds)

    async def perform(self, session: BrowserSession, timeout: float) -> None:
        return None


@dataclass
class NoopAction(Action):
    kind: ClassVar[str] = "noop"

    async def execute(self, session: BrowserSession) -> None:
        return None


@dataclass
class LoadAction(Action):
    kind: ClassVar[str] = "load"

    url: str = ""

    def __str__(self) -> str:
        return f"load:on:{_q(self.url)}"

    async def perform(self, session: BrowserSession, timeout: float) -> None:
        await session.navigate(self.url, timeout=timeout)


@dataclass
class ClickAction(Action):
    kind: ClassVar[str] = "click"

    selector: str = ""

    def __str__(self) -> str:
        return f"click:on:{_q(self.selector)}"

    async def perform(self, session: BrowserSession, timeout: float) -> None:
        await session.click(self.selector, timeout=timeout)


@dataclass
class TypeAction(Action):
    kind: ClassVar[str] = "type"

    selector: str = ""
    text: str = ""

    def __str__(self) -> str:
        return f"type:{_q(self.text)}:in:{_q(self.selector)}"

    async def perform(self, session: BrowserSession, timeout: float) -> None:
        await session.send_keys(self.selector, self.text, timeout=timeout)


@dataclass
class SubmitAction(Action):
    kind: ClassVar[str] = "submit"

    selector: str = ""

    def __str__(self) -> str:
        return f"submit:on:{_q(self.selector)}"

    async def perform(self, session: BrowserSession, timeout: float) -> None:
        await session.submit(self.selector, timeout=timeout)


@dataclass
class ValueAction(Action):
    kind: ClassVar[str] = "value"

    selector: str = ""
    value: str = ""

    def __str__(self) -> str:
        return f"value:{_q(self.value)}:in:{_q(self.selector)}"

    async def perform(self, session: BrowserSession, timeout: float) -> None:
        await session.set_value(self.selector, self.value, timeout=timeout)


@dataclass
class WaitAction(Action):
    """Wait for an element to be visible and ready.

    With an empty selector this sleeps for the whole timeout instead.
    """

    kind: ClassVar[str] = "wait"

    selector: str = ""

    def __str__(self) -> str:
        return f"wait:on:{_q(self.selector)}"

    async def execute(self, session: BrowserSession) -> None:
        if not self.selector:
            await asyncio.sleep(max(self.deadline(), 0.0))
            return
        await super().execute(session)

    async def perform(self, session: BrowserSession, timeout: float) -> None:
        await session.wait_visible(self.selector, timeout=timeout)
        await session.wait_ready(self.selector, timeout=timeout)


@dataclass
class ScrollAction(Action):
    kind: ClassVar[str] = "scroll"

    selector: str = ""

    def __str__(self) -> str:
        return f"scroll:to:{_q(self.selector)}"

    async def perform(self, session: BrowserSession, timeout: float) -> None:
        await session.scroll_into_view(self.selector, timeout=timeout)


@dataclass
class CompareAction(Action):
    """Fail unless the element text equals ``value`` ignoring case."""

    kind: ClassVar[str] = "compare"

    selector: str = ""
    value: str = ""

    def __str__(self) -> str:
        return f"compare:{_q(self.value)}:to:{_q(self.selector)}"

    async def perform(self, session: BrowserSession, timeout: float) -> None:
        text = await session.get_text(self.selector, timeout=timeout)
        if text.casefold() != self.value.casefold():
            raise ComparisonError(
                f"Selector {_q(self.selector)} value {_q(text)} does not match {_q(self.value)}"
            )


@dataclass
class RecordAction(Action):
    """Print the element text to stdout."""

    kind: ClassVar[str] = "record"

    timeout: str = "10s"
    selector: str = ""

    def __str__(self) -> str:
        return f"record:from:{_q(self.selector)}"

    async def perform(self, session: BrowserSession, timeout: float) -> None:
        text = await session.get_text(self.selector, timeout=timeout)
        print(text)


@dataclass
class ScreenshotAction(Action):
    kind: ClassVar[str] = "screenshot"

    name: str = ""

    DEFAULT_NAME: ClassVar[str] = "screenshot.png"

    def __str__(self) -> str:
        return f"screenshot:as:{_q(self.name or self.DEFAULT_NAME)}"

    async def perform(self, session: BrowserSession, timeout: float) -> None:
        data = await session.capture_screenshot(timeout=timeout)
        Path(self.name or self.DEFAULT_NAME).write_bytes(data)


@dataclass
class SleepAction(Action):
    kind: ClassVar[str] = "sleep"

    def __str__(self) -> str:
        return f"sleep:for:{self.timeout}"

    async def execute(self, session: BrowserSession) -> None:
        await asyncio.sleep(max(self.deadline(), 0.0))


@dataclass
class DebugAction(Action):
    """Capture ``debug.png``. Never fails."""

    kind: ClassVar[str] = "debug"

    async def execute(self, session: BrowserSession) -> None:
        try:
            await super().execute(session)
        except (PlaywrightError, asyncio.TimeoutError, OSError) as e:
            print(f"[debug] Screenshot failed: {e}", file=sys.stderr)

    async def perform(self, session: BrowserSession, timeout: float) -> None:
        data = await session.capture_screenshot(timeout=timeout)
        Path("debug.png").write_bytes(data)
