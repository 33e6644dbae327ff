from __future__ import annotations

import asyncio
import functools
import inspect
from collections.abc import Callable
from typing import Any, ParamSpec, TypeVar

from loguru import logger

from tracerr.errors import convert, trace
from tracerr.traced import TracedError, has_trace

P = ParamSpec("P")
R = TypeVar("R")


def log_error(
    err: Exception | None,
    log=logger,  # loguru logger-like
    level: str = "ERROR",
) -> TracedError | None:
    """Log the verbose form of *err* with its data bound as extra fields."""
    traced = convert(err)
    if traced is None:
        return None
    extra: dict[str, Any] = {"status_code": traced.status_code}
    if has_trace(traced.trace):
        extra["trace"] = traced.trace
    extra.update(traced.properties)
    log.bind(**extra).opt(depth=1).log(level, "{}", traced.verbose())
    return traced


def traced(*args: Any, **properties: Any) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator tracing every exception that escapes the wrapped function.

    *args* and *properties* are attached as with :func:`tracerr.trace`.
    """

    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*a: P.args, **kw: P.kwargs):  # type: ignore[override]
                try:
                    return await func(*a, **kw)
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    logger.debug("Tracing {} from {}", type(exc).__name__, func.__qualname__)
                    raise trace(exc, *args, **properties) from exc

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def sync_wrapper(*a: P.args, **kw: P.kwargs):  # type: ignore[override]
            try:
                return func(*a, **kw)
            except Exception as exc:
                logger.debug("Tracing {} from {}", type(exc).__name__, func.__qualname__)
                raise trace(exc, *args, **properties) from exc

        return sync_wrapper  # type: ignore[return-value]

    return decorator
