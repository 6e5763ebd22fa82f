"""
Invocation tracing for the pure engines.

``@traced_engine`` logs one ``GROUP_ENGINE_TRACE`` line per call of a
hierarchy or consolidation engine: which engine and version ran, how long
it took, whether it raised, and a fingerprint of its inputs.  Two calls
with equal inputs (the same charts, the same elimination entries, the same
period) carry the same fingerprint, which makes a report reproducible from
the logs alone.

The fingerprint hashes the arguments through ``render_to_dict``, so DTOs,
Decimals, UUID-keyed mappings and enums all hash by value.
"""

from __future__ import annotations

import functools
import hashlib
import inspect
import json
import time
from collections.abc import Callable, Mapping
from typing import Any

from group_kernel.domain.dtos import render_to_dict
from group_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

TRACE_TYPE = "GROUP_ENGINE_TRACE"
FINGERPRINT_LENGTH = 16


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """First 16 hex chars of a SHA-256 over the named arguments; absent ones hash as null."""
    canonical = json.dumps(
        {name: render_to_dict(arguments.get(name)) for name in fingerprint_fields},
        sort_keys=True,
        default=str,
    )
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """
    Wrap an engine function so every call is traced.

    Args:
        engine_name: e.g. "consolidation".
        engine_version: Bumped whenever the engine's arithmetic changes.
        fingerprint_fields: Parameter names hashed into the fingerprint;
            positional and keyword arguments are bound by name first.
    """

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                bound = signature.bind_partial(*args, **kwargs)
                fingerprint = compute_input_fingerprint(fingerprint_fields, bound.arguments)

            outcome, error = "ok", None
            started = time.perf_counter()
            try:
                return func(*args, **kwargs)
            except Exception as exc:
                outcome, error = "error", getattr(exc, "code", type(exc).__name__)
                raise
            finally:
                _logger.info(
                    TRACE_TYPE,
                    extra={
                        "trace_type": TRACE_TYPE,
                        "engine_name": engine_name,
                        "engine_version": engine_version,
                        "function": func.__qualname__,
                        "input_fingerprint": fingerprint,
                        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                        "outcome": outcome,
                        "error": error,
                    },
                )

        return wrapper

    return decorator
