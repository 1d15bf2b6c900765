"""
``@traced_engine``: one WORKSHOP_ENGINE_TRACE log record per engine call.

The record names the engine and its version, a fingerprint of the inputs
that determine the result, and how long the call took.  Two calls with
the same fingerprint and version must produce the same figures, which is
what makes a recomputed invoice total auditable after the fact.

Logs under ``workshop_kernel.engines.tracer`` so the kernel's logging
configuration applies.  A call that raises is not traced; the exception
propagates untouched.

Usage:
    @traced_engine("tax_ledger", "1.0", fingerprint_fields=("lines", "currency"))
    def compute_totals(lines, currency="EUR"):
        ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import logging
import time
from collections.abc import Callable, Mapping
from decimal import Decimal
from enum import Enum
from typing import Any

_logger = logging.getLogger("workshop_kernel.engines.tracer")

TRACE_MESSAGE = "WORKSHOP_ENGINE_TRACE"


@functools.singledispatch
def _canonicalize(value: Any) -> str:
    """
    Stable text for a fingerprinted argument.

    Dataclasses render as ``Name(field:value,...)`` in field order, mapping
    keys are sorted, None is "null".  Anything unrecognised falls back to
    ``str()``.
    """
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        body = ",".join(
            f"{f.name}:{_canonicalize(getattr(value, f.name))}" for f in dataclasses.fields(value)
        )
        return f"{type(value).__name__}({body})"
    return str(value)


@_canonicalize.register(type(None))
def _(value) -> str:
    return "null"


@_canonicalize.register
def _(value: Enum) -> str:
    return _canonicalize(value.value)


@_canonicalize.register(str)
@_canonicalize.register(int)
@_canonicalize.register(Decimal)
def _(value) -> str:
    # str- and int-based enums land here before the Enum handler
    if isinstance(value, Enum):
        return _canonicalize(value.value)
    return str(value)


@_canonicalize.register
def _(value: Mapping) -> str:
    pairs = sorted((str(k), _canonicalize(v)) for k, v in value.items())
    return "{" + ",".join(f"{k}:{v}" for k, v in pairs) + "}"


@_canonicalize.register(list)
@_canonicalize.register(tuple)
def _(value) -> str:
    return "[" + ",".join(map(_canonicalize, value)) + "]"


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """First 16 hex chars of SHA-256 over ``field=value`` pairs; absent fields hash as null."""
    canonical = "|".join(f"{name}={_canonicalize(arguments.get(name))}" for name in fingerprint_fields)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:16]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """
    Decorate a pure engine function so each successful call is traced.

    Args:
        engine_name: Engine identifier, e.g. "tax_ledger".
        engine_version: Bumped whenever the engine's arithmetic changes.
        fingerprint_fields: Parameter names hashed into input_fingerprint.
            Arguments are bound against the function's signature first, so
            positional, keyword and defaulted arguments hash alike.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        def fingerprint(args: tuple, kwargs: dict) -> str:
            if not fingerprint_fields:
                return ""
            bound = signature.bind_partial(*args, **kwargs)
            bound.apply_defaults()
            return compute_input_fingerprint(fingerprint_fields, bound.arguments)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            input_fingerprint = fingerprint(args, kwargs)
            started = time.perf_counter()
            result = func(*args, **kwargs)
            _logger.info(
                TRACE_MESSAGE,
                extra={
                    "trace_type": TRACE_MESSAGE,
                    "engine_name": engine_name,
                    "engine_version": engine_version,
                    "input_fingerprint": input_fingerprint,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                    "function": func.__qualname__,
                },
            )
            return result

        return wrapper

    return decorator
