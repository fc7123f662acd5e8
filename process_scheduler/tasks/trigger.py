"""TriggerStream — observed values → deduplicated 0/1 transitions.

A TriggerStream subscribes to ``trigger.path`` on a SignalSource and maps
every observed payload to 1 (run the task) or 0 (stop it).  Consecutive equal
results are suppressed, so the consumer only ever sees *changes*: it can
never receive START while running or STOP while idle.  Every subscription
starts from 0, so the first value forwarded is always a 1.

Iterating the stream opens a fresh subscription each time, so a controller
can restart it for the life of the process.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, AsyncIterator

from process_scheduler.ports import SignalSource
from process_scheduler.tasks.models import PathKind, ScalarValue, TriggerDescriptor


def _state_of(payload: Any) -> Any:
    if payload is None:
        return None
    if isinstance(payload, Mapping):
        return payload.get("state")
    return getattr(payload, "state", None)


def values_match(observed: Any, expected: ScalarValue) -> bool:
    """Compare a host value with a configured value.

    Configured values come from text, so ``"1"`` and ``1`` are the same
    switch position; strings are compared as written.
    """
    if observed is None:
        return False
    if observed == expected:
        return True
    return str(observed) == str(expected)


def evaluate_trigger(trigger: TriggerDescriptor, payload: Any) -> int:
    """Map one observed *payload* to 0 or 1 according to *trigger*."""
    if trigger.kind is PathKind.NOTIFICATION:
        if trigger.on_value is None:
            return 1 if payload is not None else 0
        return 1 if values_match(_state_of(payload), trigger.on_value) else 0
    assert trigger.on_value is not None, "switch triggers always carry an on value"
    return 1 if values_match(payload, trigger.on_value) else 0


class TriggerStream:
    """Async iterable of deduplicated 0/1 values for one task trigger.

    Usage::

        async for state in TriggerStream(task.trigger, source):
            ...
    """

    def __init__(self, trigger: TriggerDescriptor, source: SignalSource) -> None:
        self._trigger = trigger
        self._source = source

    @property
    def trigger(self) -> TriggerDescriptor:
        return self._trigger

    def __aiter__(self) -> AsyncIterator[int]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[int]:
        # Tasks start idle, so an initial 0 is not a change.
        last = 0
        observed = self._source.observe(self._trigger.path)
        try:
            async for payload in observed:
                state = evaluate_trigger(self._trigger, payload)
                if state == last:
                    continue
                last = state
                yield state
        finally:
            aclose = getattr(observed, "aclose", None)
            if aclose is not None:
                await aclose()
