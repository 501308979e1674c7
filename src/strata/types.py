# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Protocol values shared by layers and the dispatch engine.

A layer operation is an ``async def`` that is either a coroutine or an async
generator. Inside an async generator:

- ``value = yield`` asks to be told the value a deeper layer produces;
- ``yield resolve(value)`` answers the call outright;
- ``yield fail(error)`` (or yielding any other non-None object) reports a
  recoverable error;
- falling off the end without yielding declines the call.

A plain coroutine answers by returning a value, or declines by returning
``None``.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any, Generic, NamedTuple, TypeVar, Union

from msgspec import Struct

from .errors import LayerFailure

__all__ = (
    "Resolved",
    "Failed",
    "resolve",
    "fail",
    "Result",
    "Layer",
    "LayerResult",
    "Handler",
    "HandlerFactory",
    "layer_name",
)

T = TypeVar("T")
E = TypeVar("E")


class Resolved(Struct, Generic[T], frozen=True):
    """Terminal answer yielded by an async generator handler."""

    value: T


class Failed(Struct, Generic[E], frozen=True):
    """Recoverable error yielded by a handler."""

    error: E


def resolve(value: T) -> Resolved[T]:
    return Resolved(value)


def fail(error: E) -> Failed[E]:
    return Failed(error)


# What an async generator handler yields, and what it is sent back.
LayerResult = AsyncGenerator[Union[Resolved[T], Failed[E], E, None], T]
Handler = Union[AsyncGenerator[Any, Any], Awaitable[Any]]
HandlerFactory = Callable[..., Handler]


class Result(NamedTuple):
    """Discriminated call result: ``(True, value)`` or ``(False, error)``."""

    ok: bool
    value: Any

    @classmethod
    def success(cls, value: Any) -> Result:
        return cls(True, value)

    @classmethod
    def failure(cls, error: Any) -> Result:
        return cls(False, error)

    @property
    def error(self) -> Any:
        return None if self.ok else self.value

    def unwrap(self) -> Any:
        """Return the value, or raise ``LayerFailure`` carrying the error."""
        if not self.ok:
            raise LayerFailure(self.value)
        return self.value


class Layer:
    """Optional base class for layers.

    Subclasses get a stable display identity from ``name`` (defaulting to
    the class name). Any object with async operations can serve as a layer
    without inheriting from this.
    """

    name: str | None = None

    def __str__(self) -> str:
        return self.name or type(self).__name__

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {str(self)!r}>"


def layer_name(layer: Any) -> str:
    """Display identity used in traces and error messages."""
    return str(layer)
