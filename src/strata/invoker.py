# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Per-call dispatch over an operation's layers.

Layers are tried one at a time, in layer-list order. Each handler is driven
to its first protocol boundary and classified:

- ``RESOLVED``  - it answered; pending handlers get the value, the call succeeds
- ``DECLINED``  - it opted out and does not want the value; move on
- ``AWAITING``  - it wants the eventual value; park it and move on
- ``FAILED``    - it reported a recoverable error; the call fails right away
                  and parked handlers are never resumed

Running out of layers without a ``RESOLVED`` or ``FAILED`` step is a
configuration defect and surfaces as ``UnhandledOperationError``.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from msgspec import Struct

from .config import ResuspendPolicy, StackConfig
from .errors import HandlerProtocolError
from .propagate import abandon, propagate
from .types import Failed, HandlerFactory, Resolved, layer_name

__all__ = ("Step", "OutcomeKind", "Outcome", "CallTrace", "HandlerDriver", "LayerInvoker")

logger = logging.getLogger(__name__)


class Step(str, Enum):
    RESOLVED = "resolved"
    DECLINED = "declined"
    AWAITING = "awaiting"
    FAILED = "failed"


class HandlerState(str, Enum):
    NOT_STARTED = "not_started"
    AWAITING = "awaiting"
    DONE = "done"


class OutcomeKind(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    UNHANDLED = "unhandled"


@dataclass(slots=True)
class CallTrace:
    """Diagnostics for a single call. Never shared between calls."""

    operation: str
    attempted: list[str] = field(default_factory=list)
    pending: int = 0
    outcome: OutcomeKind | None = None


class Outcome(Struct, frozen=True):
    kind: OutcomeKind
    payload: Any = None
    trace: CallTrace | None = None


class HandlerDriver:
    """Drives one handler instance for one (call, layer) pair.

    Async generator handlers may suspend at most once at the protocol
    boundary and are resumed at most once. Coroutine handlers run to
    completion on ``start``.
    """

    __slots__ = ("operation", "layer", "_factory", "_handler", "state")

    def __init__(self, operation: str, layer: Any, factory: HandlerFactory):
        self.operation = operation
        self.layer = layer
        self._factory = factory
        self._handler: Any = None
        self.state = HandlerState.NOT_STARTED

    def _protocol_error(self, message: str, **details: Any) -> HandlerProtocolError:
        return HandlerProtocolError(
            message, operation=self.operation, layer=layer_name(self.layer), details=details
        )

    async def start(self, args: tuple, kwargs: dict[str, Any]) -> tuple[Step, Any]:
        """Create the handler and run it up to its first yield or its end."""
        if self.state is not HandlerState.NOT_STARTED:
            raise self._protocol_error("handler already started")
        handler = self._handler = self._factory(*args, **kwargs)

        if inspect.isasyncgen(handler):
            try:
                item = await handler.__anext__()
            except StopAsyncIteration:
                self.state = HandlerState.DONE
                return Step.DECLINED, None
            return await self._classify(item)

        if inspect.isawaitable(handler):
            value = await handler
            self.state = HandlerState.DONE
            if isinstance(value, Failed):
                return (Step.DECLINED, None) if value.error is None else (Step.FAILED, value.error)
            if isinstance(value, Resolved):
                value = value.value
            return (Step.DECLINED, None) if value is None else (Step.RESOLVED, value)

        self.state = HandlerState.DONE
        raise self._protocol_error(
            f"operation must produce an async generator or awaitable, got {type(handler).__name__}",
            type=type(handler).__name__,
        )

    async def _classify(self, item: Any) -> tuple[Step, Any]:
        if isinstance(item, Failed):
            item = item.error
        elif isinstance(item, Resolved):
            await self.close()
            if item.value is None:
                return Step.DECLINED, None
            return Step.RESOLVED, item.value

        if item is None:
            self.state = HandlerState.AWAITING
            return Step.AWAITING, None
        return Step.FAILED, item

    async def resume(self, value: Any, *, policy: ResuspendPolicy = "close") -> None:
        """Send the resolved value in. Whatever the handler does next is discarded."""
        if self.state is not HandlerState.AWAITING:
            raise self._protocol_error(f"cannot resume handler in state {self.state.value}")
        self.state = HandlerState.DONE
        try:
            await self._handler.asend(value)
        except StopAsyncIteration:
            return

        await self._handler.aclose()
        if policy == "error":
            raise self._protocol_error("handler suspended again after receiving the value")
        logger.warning(
            "Handler for %s on layer %s suspended again after resumption; closed it",
            self.operation,
            layer_name(self.layer),
        )

    async def close(self) -> None:
        self.state = HandlerState.DONE
        if inspect.isasyncgen(self._handler):
            await self._handler.aclose()


class LayerInvoker:
    """Dispatches calls for one operation over its ordered layer entries."""

    __slots__ = ("operation", "entries", "config")

    def __init__(
        self,
        operation: str,
        entries: Sequence[tuple[Any, HandlerFactory]],
        config: StackConfig | None = None,
    ):
        self.operation = operation
        self.entries = tuple(entries)
        self.config = config or StackConfig()

    async def invoke(self, *args: Any, **kwargs: Any) -> Outcome:
        trace = CallTrace(self.operation)
        pending: list[HandlerDriver] = []
        try:
            for layer, factory in self.entries:
                driver = HandlerDriver(self.operation, layer, factory)
                trace.attempted.append(layer_name(layer))
                step, payload = await driver.start(args, kwargs)
                logger.debug("%s: layer %s -> %s", self.operation, trace.attempted[-1], step.value)

                if step is Step.RESOLVED:
                    resumed, pending = pending, []
                    trace.pending = len(resumed)
                    await propagate(payload, resumed, policy=self.config.resuspend_policy)
                    return self._finish(trace, OutcomeKind.SUCCESS, payload)
                if step is Step.FAILED:
                    trace.pending = len(pending)
                    await abandon([driver])
                    return self._finish(trace, OutcomeKind.FAILURE, payload)
                if step is Step.AWAITING:
                    pending.append(driver)

            trace.pending = len(pending)
            return self._finish(trace, OutcomeKind.UNHANDLED, None)
        finally:
            if pending and self.config.close_abandoned:
                await abandon(pending)

    def _finish(self, trace: CallTrace, kind: OutcomeKind, payload: Any) -> Outcome:
        trace.outcome = kind
        logger.debug(
            "%s: %s after %s (%d pending)",
            self.operation,
            kind.value,
            ", ".join(trace.attempted) or "no layers",
            trace.pending,
        )
        return Outcome(kind, payload, trace)
