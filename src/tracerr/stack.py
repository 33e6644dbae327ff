from __future__ import annotations

import inspect
import itertools
import traceback
from collections.abc import Callable, Iterator
from types import FrameType, TracebackType

from pydantic import BaseModel, ConfigDict, Field

# Frames of the interpreter's own machinery that are never worth reporting.
RUNTIME_PREFIXES = (
    "importlib.",
    "runpy.",
    "asyncio.",
    "concurrent.futures.",
    "threading.",
)

_PACKAGE = __name__.partition(".")[0]

StopPredicate = Callable[[str], bool]


class StackFrame(BaseModel):
    """A single recorded call-site location."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    function: str = Field(alias="func")
    file: str
    line: int

    def __str__(self) -> str:
        return f"- {self.function}\n  {self.file}:{self.line}"


def function_name(frame: FrameType) -> str:
    """Return the module-qualified name of the function running in *frame*."""
    module = frame.f_globals.get("__name__", "?")
    name = f"{module}.{frame.f_code.co_qualname}"
    return name.rpartition("/")[2]


def is_internal(function: str) -> bool:
    """Tell whether *function* belongs to the runtime or to this package.

    Functions of the package's own test suite are not internal.
    """
    if function.startswith(RUNTIME_PREFIXES):
        return True
    if function == _PACKAGE or function.startswith(_PACKAGE + "."):
        return not any(part.startswith(("test", "Test")) for part in function.split("."))
    return False


def _make(frame: FrameType, line: int) -> StackFrame:
    return StackFrame(
        function=function_name(frame),
        file=frame.f_code.co_filename,
        line=line,
    )


def _walk(frame: FrameType | None) -> Iterator[FrameType]:
    while frame is not None:
        yield frame
        frame = frame.f_back


def _caller() -> FrameType | None:
    # the frame that called the public capture function
    current = inspect.currentframe()
    if current is None or current.f_back is None:  # pragma: no cover - non-CPython
        return None
    return current.f_back.f_back


def capture_frame(skip: int = 0) -> StackFrame | None:
    """Return the first non-internal frame *skip* levels above the caller.

    ``None`` is returned when the top of the stack is reached first.
    """
    for frame in itertools.islice(_walk(_caller()), max(skip, 0), None):
        name = function_name(frame)
        if is_internal(name):
            continue
        return _make(frame, frame.f_lineno)
    return None


def capture_all(start: int = 0, stop: StopPredicate | None = None) -> list[StackFrame]:
    """Return every non-internal frame from *start* levels above the caller.

    Walking ends at the top of the stack or right before the first frame whose
    function name satisfies *stop*.
    """
    frames: list[StackFrame] = []
    for frame in itertools.islice(_walk(_caller()), max(start, 0), None):
        name = function_name(frame)
        if stop is not None and stop(name):
            break
        if is_internal(name):
            continue
        frames.append(_make(frame, frame.f_lineno))
    return frames


def capture_traceback(
    tb: TracebackType | None, stop: StopPredicate | None = None
) -> list[StackFrame]:
    """Return the non-internal frames recorded in *tb*, raise site first."""
    frames: list[StackFrame] = []
    for frame, line in reversed(list(traceback.walk_tb(tb))):
        name = function_name(frame)
        if stop is not None and stop(name):
            break
        if is_internal(name):
            continue
        frames.append(_make(frame, line))
    return frames
