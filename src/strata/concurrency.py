# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Fan-out helpers built on anyio task groups."""

from __future__ import annotations

from collections.abc import Awaitable
from typing import TypeVar

import anyio

T = TypeVar("T")

__all__ = ("gather",)


async def gather(*aws: Awaitable[T], return_exceptions: bool = False) -> list[T | BaseException]:
    """Await all ``aws`` concurrently and collect results in call order.

    Every awaitable runs to completion; a failure never cancels its peers.
    With ``return_exceptions`` the exceptions are left in the result list,
    otherwise the first one (in completion order) is re-raised as-is once all
    peers have finished, never wrapped in an ``ExceptionGroup``.
    """
    results: list[T | BaseException] = [None] * len(aws)  # type: ignore[list-item]
    first_exc: Exception | None = None

    async def _runner(idx: int, aw: Awaitable[T]) -> None:
        nonlocal first_exc
        try:
            results[idx] = await aw
        except Exception as exc:
            results[idx] = exc
            if first_exc is None:
                first_exc = exc

    if not aws:
        return results

    async with anyio.create_task_group() as tg:
        for i, aw in enumerate(aws):
            tg.start_soon(_runner, i, aw)

    if first_exc is not None and not return_exceptions:
        raise first_exc
    return results
