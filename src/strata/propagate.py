# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import anyio

from .concurrency import gather

if TYPE_CHECKING:
    from .config import ResuspendPolicy
    from .invoker import HandlerDriver

__all__ = ("propagate", "abandon")

logger = logging.getLogger(__name__)


async def propagate(
    value: Any, pending: Sequence[HandlerDriver], *, policy: ResuspendPolicy = "close"
) -> None:
    """Send ``value`` to every pending handler concurrently and wait for all.

    What the handlers produce after resumption is discarded; they are resumed
    for their side effects (cache fills and the like). Every resumption runs to
    completion; the first exception a handler raised is then re-raised out of
    the call.
    """
    if not pending:
        return
    logger.debug("Propagating value to %d pending handler(s)", len(pending))
    await gather(*(driver.resume(value, policy=policy) for driver in pending))


async def abandon(pending: Sequence[HandlerDriver]) -> None:
    """Close handlers that will never receive a value.

    A handler that fails while closing is logged and skipped; the outcome of
    the call has already been decided and the remaining handlers still close.
    """
    if not pending:
        return
    logger.debug("Closing %d abandoned handler(s)", len(pending))
    with anyio.CancelScope(shield=True):
        for driver in pending:
            try:
                await driver.close()
            except Exception as e:
                logger.warning(
                    f"Closing abandoned handler for '{driver.operation}' on layer "
                    f"'{driver.layer}' failed: {e}",
                    exc_info=True,
                )
