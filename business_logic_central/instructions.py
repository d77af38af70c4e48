"""Instruction signatures and the event record passed to a firing."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

# An instruction receives the firing's parameters (or ``None``) and returns
# ``True`` when its conditions held and it applied its effect.
Instruction = Callable[[Sequence[Any] | None], bool]

AsyncInstruction = Callable[[Sequence[Any] | None], Awaitable[bool] | bool]


@dataclass(frozen=True)
class BusinessLogicEvent:
    """A firing request: which event, and the parameters to hand over."""

    event_name: str
    event_parameters: Sequence[Any] | None = None


def describe(instruction: Callable[..., Any]) -> str:
    """Return a readable name for ``instruction`` for log records."""
    name = getattr(instruction, "__qualname__", None) or getattr(instruction, "__name__", None)
    return name or repr(instruction)
