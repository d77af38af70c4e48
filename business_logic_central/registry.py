"""Priority-ordered conditional dispatch.

Instructions are registered against an event name and kept in registration
order. Firing an event calls them one after another with the firing's
parameters until one returns ``True``; the rest are skipped for that firing.
Events do not need to be declared ahead of time: the first registration
creates them.

The registry is meant to be built once and shared. Registration is expected
to happen while the application is being wired and firing afterwards, so no
locking is done unless ``thread_safe=True`` is passed.
"""

from __future__ import annotations

import contextlib
import inspect
import logging
import threading
from collections.abc import Callable, Iterator, Sequence
from functools import lru_cache
from typing import Any

from . import metrics
from .config import Settings, get_settings
from .errors import ErrorCategory, InstructionResultError, InvalidInstructionError
from .instructions import AsyncInstruction, BusinessLogicEvent, Instruction, describe

log = logging.getLogger(__name__)

EventRef = str | BusinessLogicEvent


def _resolve(
    event: EventRef, parameters: Sequence[Any] | None
) -> tuple[str, Sequence[Any] | None]:
    if isinstance(event, BusinessLogicEvent):
        if parameters is None:
            parameters = event.event_parameters
        return event.event_name, parameters
    return event, parameters


class BusinessLogicCentral:
    """Registry of events and the instructions registered to them."""

    def __init__(self, *, strict: bool = False, thread_safe: bool = False) -> None:
        self._events: dict[str, list[Instruction]] = {}
        self._lock: contextlib.AbstractContextManager = (
            threading.RLock() if thread_safe else contextlib.nullcontext()
        )
        self.strict = strict
        self.thread_safe = thread_safe

    @classmethod
    def from_settings(cls, settings: Settings) -> BusinessLogicCentral:
        return cls(strict=settings.strict, thread_safe=settings.thread_safe)

    # Registration -----------------------------------------------------------

    def add_instruction_to_event(self, instruction: Instruction, event_name: str) -> None:
        """Append ``instruction`` to ``event_name``, creating the event if needed."""

        if self.strict:
            self._validate_registration(instruction, event_name)
        with self._lock:
            instructions = self._events.setdefault(event_name, [])
            instructions.append(instruction)
            total = len(instructions)
        if log.isEnabledFor(logging.DEBUG):
            log.debug(
                "instruction registered",
                extra={
                    "event_name": event_name,
                    "instruction": describe(instruction),
                    "instructions_total": total,
                },
            )

    def on(
        self, event_name: str, instruction: Instruction | None = None
    ) -> Instruction | Callable[[Instruction], Instruction]:
        """Register ``instruction`` for ``event_name``.

        If ``instruction`` is ``None`` this functions as a decorator factory::

            central = BusinessLogicCentral()


            @central.on("route.dashboard")
            def redirect_if_logged_out(args): ...

        The decorated function is returned unchanged.
        """

        if instruction is not None:
            self.add_instruction_to_event(instruction, event_name)
            return instruction

        def decorator(func: Instruction) -> Instruction:
            self.add_instruction_to_event(func, event_name)
            return func

        return decorator

    def _validate_registration(self, instruction: Any, event_name: Any) -> None:
        if not isinstance(event_name, str) or not event_name:
            self._reject(f"event name must be a non-empty string, got {event_name!r}", event_name)
        if not callable(instruction):
            self._reject(
                f"instruction for {event_name!r} is not callable: {instruction!r}", event_name
            )

    def _reject(self, message: str, event_name: Any) -> None:
        log.debug(
            "registration rejected: %s",
            message,
            extra={"event_name": event_name, "error_category": ErrorCategory.REGISTRATION},
        )
        raise InvalidInstructionError(message, event_name)

    # Firing -----------------------------------------------------------------

    def do_event(self, event: EventRef, parameters: Sequence[Any] | None = None) -> bool:
        """Run the instructions registered for ``event``.

        Instructions run in the order they were added until one returns
        ``True``. Returns ``False`` if the event is unknown or has no
        instructions, otherwise ``True``, whether or not any instruction
        applied. Exceptions raised by an instruction propagate and end the
        firing.

        The event's list is read as the firing goes, so an instruction
        registered on the same event by an earlier instruction still runs in
        this firing unless something before it applies.
        """

        name, params = _resolve(event, parameters)
        instructions = self._begin(name)
        if not instructions:
            return False

        with metrics.event_latency_ms.time():
            for instruction in self._walk(instructions):
                metrics.instructions_invoked_total.inc()
                try:
                    outcome = instruction(params)
                except Exception:
                    self._log_failure(name, instruction)
                    raise
                if self._settle(name, instruction, outcome):
                    break
        self._log_processed(name)
        return True

    async def do_event_async(
        self, event: EventRef, parameters: Sequence[Any] | None = None
    ) -> bool:
        """Like :meth:`do_event` but awaits instructions that return awaitables.

        Instructions are awaited one at a time so a higher priority instruction
        always settles before the next one starts.
        """

        name, params = _resolve(event, parameters)
        instructions: list[AsyncInstruction] | None = self._begin(name)
        if not instructions:
            return False

        with metrics.event_latency_ms.time():
            for instruction in self._walk(instructions):
                metrics.instructions_invoked_total.inc()
                try:
                    outcome = instruction(params)
                    if inspect.isawaitable(outcome):
                        outcome = await outcome
                except Exception:
                    self._log_failure(name, instruction)
                    raise
                if self._settle(name, instruction, outcome):
                    break
        self._log_processed(name)
        return True

    def _begin(self, name: str) -> list[Instruction] | None:
        """Return the live instruction list for ``name``, or ``None`` if it is unknown."""

        with self._lock:
            instructions = self._events.get(name)
            total = len(instructions) if instructions is not None else 0

        if instructions is None:
            metrics.events_unrecognized_total.inc()
            log.debug("event %s fired but never registered", name, extra={"event_name": name})
        elif not total:
            metrics.events_unrecognized_total.inc()
            log.debug(
                "event %s fired with no instructions registered",
                name,
                extra={"event_name": name, "instructions_total": 0},
            )
        else:
            metrics.events_fired_total.inc()
            log.debug(
                "firing event %s",
                name,
                extra={"event_name": name, "instructions_total": total},
            )
        return instructions

    def _walk(self, instructions: list[Instruction]) -> Iterator[Instruction]:
        # Length is re-read on every step; entries appended mid-firing are seen.
        index = 0
        while True:
            with self._lock:
                if index >= len(instructions):
                    return
                instruction = instructions[index]
            yield instruction
            index += 1

    def _settle(self, name: str, instruction: Instruction, outcome: Any) -> bool:
        if self.strict and not isinstance(outcome, bool):
            raise InstructionResultError(
                f"instruction {describe(instruction)} for {name!r} returned "
                f"{type(outcome).__name__}, expected bool",
                name,
            )
        applied = bool(outcome)
        if applied:
            metrics.instructions_applied_total.inc()
        if log.isEnabledFor(logging.DEBUG):
            log.debug(
                "instruction evaluated",
                extra={
                    "event_name": name,
                    "instruction": describe(instruction),
                    "outcome": applied,
                },
            )
        return applied

    def _log_failure(self, name: str, instruction: Instruction) -> None:
        if not log.isEnabledFor(logging.DEBUG):
            return
        label = describe(instruction)
        log.debug(
            "instruction %s raised during %s",
            label,
            name,
            extra={
                "event_name": name,
                "instruction": label,
                "error_category": ErrorCategory.INSTRUCTION,
            },
        )

    def _log_processed(self, name: str) -> None:
        log.debug(
            "event %s processed",
            name,
            extra={"event_name": name, "latency_ms": metrics.event_latency_ms.last_ms},
        )

    # Introspection ----------------------------------------------------------

    def has_event(self, event_name: str) -> bool:
        with self._lock:
            return event_name in self._events

    __contains__ = has_event

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def instructions_for(self, event_name: str) -> tuple[Instruction, ...]:
        """Return the instructions for ``event_name`` in priority order."""
        with self._lock:
            return tuple(self._events.get(event_name, ()))

    def event_names(self) -> list[str]:
        with self._lock:
            return list(self._events)

    # Housekeeping -----------------------------------------------------------

    def clear_event(self, event_name: str) -> None:
        """Drop the instructions of ``event_name`` but keep the event known."""
        with self._lock:
            if event_name in self._events:
                self._events[event_name].clear()

    def reset(self) -> None:
        """Forget every event. Used for testing and shutdown."""
        with self._lock:
            self._events.clear()


@lru_cache(maxsize=1)
def get_central() -> BusinessLogicCentral:
    """Return the process-wide registry shared by registrants and firers."""
    return BusinessLogicCentral.from_settings(get_settings())
