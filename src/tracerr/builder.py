from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any, Self

from tracerr.chain import WrappedError
from tracerr.stack import StackFrame, capture_frame
from tracerr.status import status_text
from tracerr.traced import DEFAULT_STATUS_CODE, TracedError, has_trace

BADKEY = "!BADKEY"
UNSPECIFIED_MESSAGE = "unspecified error"

_DIRECTIVE = re.compile(r"%[-+# 0]*\d*(?:\.\d*)?(?P<verb>[a-zA-Z%])")
_TRACE_ID = re.compile(r"[0-9a-fA-F]{32}")


def count_placeholders(pattern: str) -> int:
    return pattern.count("%") - 2 * pattern.count("%%")


def is_trace_id(value: str) -> bool:
    return _TRACE_ID.fullmatch(value) is not None


def format_message(pattern: str, params: Sequence[Any]) -> tuple[str, list[Exception]]:
    """Substitute *params* into the printf-style *pattern*.

    ``%v`` renders any value, ``%w`` also collects the value when it is an
    exception. Returns the message and the collected exceptions.
    """
    wrapped: list[Exception] = []
    used = 0

    def substitute(match: re.Match[str]) -> str:
        nonlocal used
        directive, verb = match.group(0), match["verb"]
        if verb == "%":
            return "%"
        if used >= len(params):
            return directive
        value = params[used]
        used += 1
        if verb in "vw":
            if verb == "w" and isinstance(value, Exception):
                wrapped.append(value)
            directive = directive[:-1] + "s"
        try:
            return directive % (value,)
        except (TypeError, ValueError):
            return f"%!{verb}({type(value).__name__}={value})"

    message = _DIRECTIVE.sub(substitute, pattern)
    if used < len(params):
        extra = ", ".join(f"{type(v).__name__}={v}" for v in params[used:])
        message += f"%!(EXTRA {extra})"
    return message, wrapped


class ErrorBuilder:
    """Assemble a :class:`TracedError` one option at a time.

    Example::

        ErrorBuilder("user %s not found", name).with_status(404).error()
    """

    def __init__(self, pattern: str = "", *params: Any) -> None:
        self._err: Exception | None = None
        self._stack: list[StackFrame] = []
        self._status_code = 0
        self._trace = ""
        self._properties: dict[str, Any] = {}
        if pattern:
            # An empty pattern must leave the cause unset so the next error
            # passed in becomes the cause itself.
            message, wrapped = format_message(pattern, params)
            self._err = WrappedError(message, *wrapped) if wrapped else Exception(message)

    def with_status(self, code: int) -> Self:
        if isinstance(code, bool) or not isinstance(code, int) or code < 0:
            return self.with_property(BADKEY, code)
        self._status_code = code
        if self._err is None:
            self._err = Exception(status_text(code))
        return self

    def with_cause(self, cause: Exception) -> Self:
        if self._err is None:
            self._err = cause
        else:
            self._err = WrappedError(f"{self._err}: {cause}", self._err, cause)
        if isinstance(cause, TracedError):
            if not self._status_code:
                self._status_code = cause.status_code
            if not has_trace(self._trace):
                self._trace = cause.trace
            self._properties.update(cause.properties)
            self._stack = list(cause.stack)
        return self

    def with_trace(self, trace_id: str) -> Self:
        self._trace = trace_id
        return self

    def with_property(self, key: str, value: Any = "") -> Self:
        self._properties[key] = value
        return self

    def with_properties(self, **properties: Any) -> Self:
        self._properties.update(properties)
        return self

    def build(self) -> TracedError:
        """Return the error without recording a stack frame."""
        return TracedError(
            err=self._err if self._err is not None else Exception(UNSPECIFIED_MESSAGE),
            stack=list(self._stack),
            status_code=self._status_code or DEFAULT_STATUS_CODE,
            trace=self._trace,
            properties=dict(self._properties),
        )

    def error(self) -> TracedError:
        """Return the error with the caller's location appended to its stack."""
        traced = self.build()
        frame = capture_frame()
        if frame is not None:
            traced.stack.append(frame)
        return traced


def construct(
    pattern: str, args: Sequence[Any], properties: dict[str, Any] | None = None
) -> ErrorBuilder:
    """Classify *args* by type onto a new :class:`ErrorBuilder`.

    The leading args fill the placeholders of *pattern*. The rest are read in
    order: an int is a status code, an exception is a cause, a 32 hex digit
    string is a trace id, any other string is a property key followed by its
    value. Anything else is kept under the ``!BADKEY`` property.
    """
    n = min(count_placeholders(pattern), len(args))
    builder = ErrorBuilder(pattern, *args[:n])
    i = n
    while i < len(args):
        arg = args[i]
        i += 1
        if isinstance(arg, int):
            # bools and negative ints end up under BADKEY
            builder.with_status(arg)
        elif isinstance(arg, Exception):
            builder.with_cause(arg)
        elif isinstance(arg, str):
            if is_trace_id(arg):
                builder.with_trace(arg)
            elif i < len(args):
                builder.with_property(arg, args[i])
                i += 1
            else:
                builder.with_property(arg)
        else:
            builder.with_property(BADKEY, arg)
    if properties:
        builder.with_properties(**properties)
    return builder
