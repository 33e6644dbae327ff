from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

from loguru import logger

from tracerr.builder import construct
from tracerr.chain import JoinedError
from tracerr.stack import StackFrame, capture_traceback
from tracerr.traced import DEFAULT_STATUS_CODE, TracedError


def new(pattern: str = "", /, *args: Any, **properties: Any) -> TracedError:
    """Create an error with a static or formatted message.

    If *pattern* contains ``%`` directives, the matching number of leading
    *args* are used to format it. The remaining args are read by type::

        new("failed to parse %r", path,
            exc,                                  # cause, wrapped
            400,                                  # status code
            "ba0da7b3d3150f20702229c4521b58e9",   # trace id
            "line", lineno,                       # property
        )

    Keyword arguments are added as properties too. When *pattern* is empty
    and a status code comes first, its reason phrase becomes the message.
    The caller's location is recorded in the stack.
    """
    return construct(pattern, args, properties).error()


def trace(err: Exception | None, /, *args: Any, **properties: Any) -> TracedError | None:
    """Record the caller's location in the stack of *err*.

    The extra arguments are read like those of :func:`new`.
    """
    if err is None:
        return None
    return construct("", (err, *args), properties).error()


def convert(err: Exception | None) -> TracedError | None:
    """Return *err* as a :class:`TracedError`.

    Traced errors are returned as is. Nothing is recorded in the stack, use
    :func:`trace` for that.
    """
    if err is None:
        return None
    if isinstance(err, TracedError):
        if not err.status_code:
            err.status_code = DEFAULT_STATUS_CODE
        return err
    return TracedError(err=err, status_code=DEFAULT_STATUS_CODE)


def join(*errs: Exception | None) -> TracedError | None:
    """Aggregate several errors into one.

    With more than one error, their stacks, status codes and properties are
    dropped and a new stack is started.
    """
    present = [err for err in errs if err is not None]
    if not present:
        return None
    if len(present) == 1:
        return construct("", present).error()
    return construct("", (JoinedError(present),)).error()


def status_code(err: Exception | None) -> int:
    """Return the status code of *err*, ``500`` by default and ``0`` for ``None``."""
    if err is None:
        return 0
    if isinstance(err, TracedError):
        return err.status_code or DEFAULT_STATUS_CODE
    return DEFAULT_STATUS_CODE


def properties(err: Exception | None) -> dict[str, Any] | None:
    if err is None:
        return None
    if isinstance(err, TracedError):
        return dict(err.properties)
    return {}


def trace_id(err: Exception | None) -> str | None:
    if err is None:
        return None
    if isinstance(err, TracedError):
        return err.trace
    return ""


def frames(err: Exception | None) -> list[StackFrame] | None:
    if err is None:
        return None
    if isinstance(err, TracedError):
        return list(err.stack)
    return []


def _recovered(exc: Exception) -> TracedError:
    logger.debug("Recovered {}: {}", type(exc).__name__, exc)
    traced = construct("", (exc,)).build()
    traced.stack.extend(capture_traceback(exc.__traceback__, stop=_CATCHERS.__contains__))
    return traced


def catch_panic(body: Callable[[], Exception | None]) -> Exception | None:
    """Call *body* and return whatever it raises as a traced error.

    The stack of the returned error holds every frame from the raise site up
    to the call of ``catch_panic``. A value returned by *body* passes through.

    Example::

        err = catch_panic(lambda: risky(payload))
    """
    try:
        return body()
    except Exception as exc:
        return _recovered(exc)


async def acatch_panic(body: Callable[[], Awaitable[Exception | None]]) -> Exception | None:
    """Await *body* and return whatever it raises as a traced error."""
    try:
        return await body()
    except Exception as exc:
        return _recovered(exc)


_CATCHERS = frozenset(
    f"{__name__}.{func.__qualname__}" for func in (catch_panic, acatch_panic)
)
