# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Composition entry points.

``compose`` turns an ordered list of layers into a ``Stack``: one awaitable
callable per operation name found on any layer. Earlier layers are tried
first, so the usual arrangement is fastest-first::

    db = compose([MemoryCache(), RedisCache(), Postgres()])
    ok, uid = await db.get_uid(token)
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import Any

from .config import StackConfig
from .errors import LayerConfigError, UnhandledOperationError
from .invoker import LayerInvoker, Outcome, OutcomeKind
from .registry import OperationRegistry
from .types import Result

__all__ = ("compose", "stack", "Stack", "Operation", "to_result")

logger = logging.getLogger(__name__)


def to_result(outcome: Outcome) -> Result:
    """Map an outcome to the caller-visible result, raising if unhandled."""
    if outcome.kind is OutcomeKind.SUCCESS:
        return Result.success(outcome.payload)
    if outcome.kind is OutcomeKind.FAILURE:
        return Result.failure(outcome.payload)
    trace = outcome.trace
    raise UnhandledOperationError(
        trace.operation if trace else "<unknown>",
        trace.attempted if trace else (),
    )


class Operation:
    """Awaitable entry point for one operation of a stack."""

    def __init__(self, invoker: LayerInvoker):
        self.name = invoker.operation
        self._invoker = invoker
        self.__name__ = self.__qualname__ = invoker.operation

    @property
    def layers(self) -> tuple[Any, ...]:
        return tuple(layer for layer, _ in self._invoker.entries)

    async def __call__(self, *args: Any, **kwargs: Any) -> Result:
        return to_result(await self._invoker.invoke(*args, **kwargs))

    def __repr__(self) -> str:
        return f"<Operation {self.name} layers=[{', '.join(map(str, self.layers))}]>"


class Stack:
    """Unified API over an ordered chain of layers."""

    def __init__(self, layers: Sequence[Any], *, config: StackConfig | None = None):
        self._config = config or StackConfig.from_settings()
        self._registry = OperationRegistry(layers)
        self._operations = {
            name: Operation(LayerInvoker(name, self._registry.entries(name), self._config))
            for name in self._registry
        }
        logger.debug(
            "Composed %d layer(s) into %d operation(s): %s",
            len(self._registry.layers),
            len(self._operations),
            ", ".join(self._operations),
        )

    @property
    def config(self) -> StackConfig:
        return self._config

    @property
    def registry(self) -> OperationRegistry:
        return self._registry

    @property
    def layers(self) -> tuple[Any, ...]:
        return self._registry.layers

    @property
    def operations(self) -> tuple[str, ...]:
        return tuple(self._operations)

    async def call(self, name: str, *args: Any, **kwargs: Any) -> Result:
        return await self[name](*args, **kwargs)

    def __getitem__(self, name: str) -> Operation:
        return self._operations[name]

    def __getattr__(self, name: str) -> Operation:
        if not name.startswith("_"):
            try:
                return self._operations[name]
            except KeyError:
                pass
        raise AttributeError(f"{type(self).__name__!r} has no operation {name!r}")

    def __contains__(self, name: object) -> bool:
        return name in self._operations

    def __iter__(self) -> Iterator[str]:
        return iter(self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    def __dir__(self) -> list[str]:
        return sorted(set(super().__dir__()) | set(self._operations))

    def __repr__(self) -> str:
        layers = ", ".join(map(str, self.layers))
        return f"<Stack layers=[{layers}] operations={list(self._operations)}>"


def compose(layers: Sequence[Any], *, config: StackConfig | None = None) -> Stack:
    """Compose ``layers`` (a list or tuple, tried in order) into a ``Stack``."""
    if isinstance(layers, (str, bytes)) or not isinstance(layers, Sequence):
        raise LayerConfigError.from_value(layers)
    return Stack(layers, config=config)


def stack(target: Any, *sources: Any, config: StackConfig | None = None) -> Stack:
    """Compose ``target`` followed by ``sources``; shorthand for ``compose([target, *sources])``."""
    return Stack([target, *sources], config=config)
