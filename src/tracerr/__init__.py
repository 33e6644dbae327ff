"""Errors augmented with a stack trace, status code, trace id and properties."""

from loguru import logger

from tracerr.builder import BADKEY, ErrorBuilder, construct
from tracerr.chain import JoinedError, WrappedError, as_, is_, unwrap
from tracerr.errors import (
    acatch_panic,
    catch_panic,
    convert,
    frames,
    join,
    new,
    properties,
    status_code,
    trace,
    trace_id,
)
from tracerr.stack import StackFrame
from tracerr.status import STATUS_TEXT, status_text
from tracerr.traced import ZERO_TRACE, StreamedError, TracedError

logger.disable(__name__)

__all__ = [
    "BADKEY",
    "STATUS_TEXT",
    "ZERO_TRACE",
    "ErrorBuilder",
    "JoinedError",
    "StackFrame",
    "StreamedError",
    "TracedError",
    "WrappedError",
    "acatch_panic",
    "as_",
    "catch_panic",
    "construct",
    "convert",
    "frames",
    "is_",
    "join",
    "new",
    "properties",
    "status_code",
    "status_text",
    "trace",
    "trace_id",
    "unwrap",
]
