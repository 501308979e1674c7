# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import inspect
from collections.abc import Iterator, Mapping, Sequence
from types import MappingProxyType
from typing import Any

from .types import HandlerFactory

__all__ = ("OperationRegistry", "discover_operations")

Entry = tuple[Any, HandlerFactory]


def _is_operation(name: str, attr: Any) -> bool:
    if not isinstance(name, str) or name.startswith("_"):
        return False
    func = inspect.unwrap(getattr(attr, "__func__", attr))
    return inspect.isasyncgenfunction(func) or inspect.iscoroutinefunction(func)


def discover_operations(layer: Any) -> dict[str, HandlerFactory]:
    """Return the operations ``layer`` exposes, in the layer's own key order.

    Mapping layers contribute every string key with a callable value. Other
    objects contribute public async methods and async callables stored on
    the instance: instance attributes first, then class attributes from the
    most-derived class down the MRO.
    """
    if isinstance(layer, Mapping):
        return {k: v for k, v in layer.items() if isinstance(k, str) and callable(v)}

    found: dict[str, HandlerFactory] = {}
    namespaces = [getattr(layer, "__dict__", {})]
    namespaces.extend(vars(klass) for klass in type(layer).__mro__ if klass is not object)
    for ns in namespaces:
        for name, attr in ns.items():
            if name in found or not _is_operation(name, attr):
                continue
            bound = getattr(layer, name)
            if callable(bound):
                found[name] = bound
    return found


class OperationRegistry:
    """Operation name -> ordered ``(layer, factory)`` entries.

    Built once from the layer list; nothing here invokes a handler. Layers
    that lack an operation are simply missing from its entries, and every
    entry list keeps the relative order of the layer list.
    """

    __slots__ = ("_entries", "_layers")

    def __init__(self, layers: Sequence[Any]):
        self._layers = tuple(layers)
        entries: dict[str, list[Entry]] = {}
        for layer in self._layers:
            for name, factory in discover_operations(layer).items():
                entries.setdefault(name, []).append((layer, factory))
        self._entries = MappingProxyType({k: tuple(v) for k, v in entries.items()})

    @property
    def layers(self) -> tuple[Any, ...]:
        return self._layers

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._entries)

    def entries(self, name: str) -> tuple[Entry, ...]:
        return self._entries[name]

    def layers_for(self, name: str) -> tuple[Any, ...]:
        return tuple(layer for layer, _ in self._entries[name])

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"OperationRegistry({', '.join(self._entries)})"
