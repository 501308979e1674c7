# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

from .config import StackConfig, StrataSettings, configure_logging, get_settings
from .errors import (
    HandlerProtocolError,
    LayerConfigError,
    LayerFailure,
    StrataError,
    UnhandledOperationError,
    UnhandledOperationFault,
)
from .invoker import CallTrace, LayerInvoker, Outcome, OutcomeKind, Step
from .registry import OperationRegistry
from .composition import Operation, Stack, compose, stack, to_result
from .types import Failed, Layer, LayerResult, Resolved, Result, fail, resolve

__version__ = "0.1.0"

__all__ = (
    "compose",
    "stack",
    "Stack",
    "Operation",
    "to_result",
    "Layer",
    "LayerResult",
    "Result",
    "Resolved",
    "Failed",
    "resolve",
    "fail",
    "OperationRegistry",
    "LayerInvoker",
    "CallTrace",
    "Outcome",
    "OutcomeKind",
    "Step",
    "StackConfig",
    "StrataSettings",
    "configure_logging",
    "get_settings",
    "StrataError",
    "LayerConfigError",
    "UnhandledOperationError",
    "UnhandledOperationFault",
    "HandlerProtocolError",
    "LayerFailure",
)
