# Copyright (c) 2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

"""Error hierarchy for strata.

Recoverable, user-facing failures are never exceptions: a layer reports them
through its handler and the caller receives ``Result(False, error)``. The
classes here cover everything else - composition mistakes, operations no
layer could serve, and handlers that break the suspend/resume contract.
Exceptions raised by the handlers themselves pass through untouched.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, ClassVar

__all__ = (
    "StrataError",
    "LayerConfigError",
    "UnhandledOperationError",
    "UnhandledOperationFault",
    "HandlerProtocolError",
    "LayerFailure",
)


class StrataError(Exception):
    """Base for all strata errors.

    Carries a machine-readable ``code``, free-form ``details`` and
    ``context`` dictionaries, and an optional cause that is chained onto
    ``__cause__`` so tracebacks stay intact.
    """

    default_message: ClassVar[str] = "strata error"
    code: ClassVar[str] = "strata_error"
    severity: ClassVar[str] = "error"

    def __init__(
        self,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
        context: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ):
        super().__init__(message or self.default_message)
        if cause is not None:
            self.__cause__ = cause
        self.message = message or self.default_message
        self.details = details or {}
        self.context = context or {}

    def to_dict(self, *, include_cause: bool = False) -> dict[str, Any]:
        """Serialize error to a structured dictionary for logging."""
        data = {
            "error": self.__class__.__name__,
            "code": type(self).code,
            "message": self.message,
            "severity": type(self).severity,
            **({"details": self.details} if self.details else {}),
            **({"context": self.context} if self.context else {}),
        }
        if include_cause and self.__cause__ is not None:
            data["cause"] = repr(self.__cause__)
        return data


class LayerConfigError(StrataError, TypeError):
    """The layer list handed to ``compose`` is unusable."""

    default_message = "layers must be a sequence"
    code = "layer_config"

    @classmethod
    def from_value(cls, value: Any, *, expected: str = "list or tuple of layers"):
        return cls(
            f"layers must be a {expected}, got {type(value).__name__}",
            details={"type": type(value).__name__, "expected": expected},
        )


class UnhandledOperationError(StrataError):
    """No layer produced a value or an error for an operation.

    This is a configuration defect rather than a request-level failure: the
    caller cannot fix it by changing arguments, so it is raised instead of
    being returned as a failed ``Result``.
    """

    default_message = "operation was not handled by any configured layers"
    code = "unhandled_operation"
    severity = "critical"

    def __init__(self, operation: str, attempted: Sequence[str] = (), **kwargs: Any):
        self.operation = operation
        self.attempted = tuple(attempted)
        message = (
            f"operation was not handled by any configured layers: {operation} "
            f"(attempted layers: {', '.join(self.attempted)})"
        )
        details = {"operation": operation, "attempted": list(self.attempted)}
        super().__init__(message, details=details, **kwargs)


UnhandledOperationFault = UnhandledOperationError


class HandlerProtocolError(StrataError):
    """A layer handler did not follow the suspend/resume contract."""

    default_message = "layer handler violated the suspend/resume protocol"
    code = "handler_protocol"

    def __init__(self, message: str | None = None, *, operation: str, layer: str, **kwargs: Any):
        self.operation = operation
        self.layer = layer
        details = {"operation": operation, "layer": layer}
        details.update(kwargs.pop("details", None) or {})
        super().__init__(message, details=details, **kwargs)


class LayerFailure(StrataError):
    """Raised by ``Result.unwrap()`` when the result carries an error payload."""

    default_message = "layer reported an error"
    code = "layer_failure"
    severity = "warning"

    def __init__(self, error: Any):
        self.error = error
        super().__init__(f"layer reported an error: {error!r}", details={"error": repr(error)})
