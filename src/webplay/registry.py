"""Action registry: maps a kind name to a fresh default-configured action."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from webplay.actions import (
    Action,
    ClickAction,
    CompareAction,
    DebugAction,
    LoadAction,
    NoopAction,
    RecordAction,
    ScreenshotAction,
    ScrollAction,
    SleepAction,
    SubmitAction,
    TypeAction,
    ValueAction,
    WaitAction,
)
from webplay.errors import UnknownActionError

DEFAULT_TIMEOUT = "60s"


@dataclass(frozen=True)
class ActionSpec:
    name: str
    model: type[Action]
    timeout: str = DEFAULT_TIMEOUT

    def build(self) -> Action:
        return self.model(timeout=self.timeout)


class ActionRegistry:
    """Registry of action kinds.

    Lookups are case-insensitive and always construct a new instance, so
    callers are free to mutate what they get back. Unknown names resolve
    to a NoopAction unless the registry is strict.
    """

    def __init__(self, strict: bool = False) -> None:
        self.strict = strict
        self._actions: dict[str, ActionSpec] = {}

    def register(
        self,
        model: type[Action],
        *,
        name: str | None = None,
        timeout: str = DEFAULT_TIMEOUT,
    ) -> type[Action]:
        if not issubclass(model, Action):
            raise TypeError("model must subclass Action")
        action_name = (name or model.kind).lower()
        self._actions[action_name] = ActionSpec(name=action_name, model=model, timeout=timeout)
        return model

    def resolve(self, name: str) -> Action:
        spec = self._actions.get(name.lower())
        if spec is None:
            if self.strict:
                raise UnknownActionError(name)
            return NoopAction(timeout=DEFAULT_TIMEOUT)
        return spec.build()

    def kinds(self) -> list[str]:
        return sorted(self._actions)

    def copy(self, strict: bool | None = None) -> "ActionRegistry":
        other = ActionRegistry(strict=self.strict if strict is None else strict)
        other._actions = dict(self._actions)
        return other

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._actions

    def __iter__(self) -> Iterator[ActionSpec]:
        return iter(self._actions.values())


registry = ActionRegistry()

registry.register(LoadAction)
registry.register(ClickAction)
registry.register(TypeAction)
registry.register(SubmitAction)
registry.register(ValueAction)
registry.register(WaitAction)
registry.register(ScrollAction)
registry.register(CompareAction)
registry.register(RecordAction, timeout="10s")
registry.register(ScreenshotAction)
registry.register(SleepAction)
registry.register(DebugAction)
registry.register(NoopAction)


def resolve(name: str) -> Action:
    """Resolve ``name`` against the default registry."""
    return registry.resolve(name)
