"""Tests for registry module."""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

import pytest

from webplay.actions import (
    Action,
    ClickAction,
    LoadAction,
    NoopAction,
    RecordAction,
    SleepAction,
    TypeAction,
)
from webplay.errors import UnknownActionError
from webplay.registry import ActionRegistry, registry, resolve


class TestDefaultRegistry:
    def test_builtin_kinds(self):
        assert registry.kinds() == [
            "click", "compare", "debug", "load", "noop", "record", "screenshot",
            "scroll", "sleep", "submit", "type", "value", "wait",
        ]

    @pytest.mark.parametrize(
        "name, cls",
        [("load", LoadAction), ("click", ClickAction), ("type", TypeAction), ("sleep", SleepAction)],
    )
    def test_resolve_returns_kind(self, name, cls):
        action = resolve(name)
        assert type(action) is cls
        assert action.timeout == "60s"

    def test_record_default_timeout(self):
        action = resolve("record")
        assert isinstance(action, RecordAction)
        assert action.timeout == "10s"

    def test_fields_start_empty(self):
        action = resolve("type")
        assert action.selector == ""
        assert action.text == ""

    def test_case_insensitive_kind(self):
        assert isinstance(resolve("Load"), LoadAction)
        assert "CLICK" in registry

    def test_each_lookup_is_fresh(self):
        first = resolve("click")
        first.selector = "#mutated"
        second = resolve("click")
        assert second is not first
        assert second.selector == ""


class TestUnknownKinds:
    def test_permissive_falls_back_to_noop(self):
        action = resolve("clikc")
        assert type(action) is NoopAction

    def test_strict_raises(self):
        strict = registry.copy(strict=True)
        with pytest.raises(UnknownActionError, match="clikc"):
            strict.resolve("clikc")

    def test_copy_keeps_default_permissive(self):
        strict = registry.copy(strict=True)
        assert strict.strict is True
        assert registry.strict is False
        assert strict.kinds() == registry.kinds()


class TestRegister:
    def test_register_custom_kind(self):
        @dataclass
        class HoverAction(Action):
            kind: ClassVar[str] = "hover"
            selector: str = ""

        custom = ActionRegistry()
        custom.register(HoverAction, timeout="5s")
        action = custom.resolve("hover")
        assert isinstance(action, HoverAction)
        assert action.timeout == "5s"
        assert "hover" not in registry

    def test_register_rejects_non_actions(self):
        with pytest.raises(TypeError):
            ActionRegistry().register(dict)  # type: ignore[arg-type]
