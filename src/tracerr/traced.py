from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field
from pydantic_core import to_json

from tracerr.stack import StackFrame

ZERO_TRACE = "0" * 32
DEFAULT_STATUS_CODE = 500


class StreamedError(BaseModel):
    """Schema of a traced error sent across a process boundary.

    Keys other than the four below are the error's properties.
    """

    model_config = ConfigDict(extra="allow")

    error: str
    status_code: int = Field(default=0, ge=0, alias="statusCode")
    trace: str = Field(default="", pattern=r"^([0-9a-fA-F]{32})?$")
    stack: list[StackFrame] = Field(default_factory=list)


def has_trace(trace: str) -> bool:
    return bool(trace) and trace != ZERO_TRACE


@dataclass(eq=False, repr=False)
class TracedError(Exception):
    """An error augmented with a stack trace, status code, trace id and properties.

    Attributes:
        err: The wrapped error. Its message is the message of this error.
        stack: Recorded call sites, innermost first.
        status_code: Protocol status code, ``0`` when unset.
        trace: Distributed trace id, 32 hex digits.
        properties: Diagnostic key/value pairs kept out of the message.
    """

    err: Exception
    stack: list[StackFrame] = field(default_factory=list)
    status_code: int = 0
    trace: str = ""
    properties: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.__cause__ = self.err

    def __str__(self) -> str:
        return str(self.err)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({str(self)!r}, status_code={self.status_code}, "
            f"frames={len(self.stack)})"
        )

    def __format__(self, format_spec: str) -> str:
        if format_spec.startswith(("+", "#")):
            return self.verbose()
        if format_spec in ("s", "v"):
            return str(self)
        return format(str(self), format_spec)

    def __reduce__(self) -> tuple[Any, ...]:
        return (
            type(self),
            (self.err, self.stack, self.status_code, self.trace, self.properties),
        )

    def unwrap(self) -> Exception:
        return self.err

    def verbose(self) -> str:
        """Render the message followed by status, trace, properties and stack."""
        lines = [str(self)]
        if self.status_code not in (0, DEFAULT_STATUS_CODE):
            lines.append(f"statusCode={self.status_code}")
        if has_trace(self.trace):
            lines.append(f"trace={self.trace}")
        lines.extend(f"{key}={value}" for key, value in self.properties.items())
        if self.stack:
            lines.append("")
            lines.extend(str(frame) for frame in self.stack)
        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Flatten the error into a JSON-compatible mapping."""
        data: dict[str, Any] = dict(self.properties)
        data["error"] = str(self.err)
        if self.status_code:
            data["statusCode"] = self.status_code
        else:
            data.pop("statusCode", None)
        if self.stack:
            data["stack"] = [frame.model_dump(by_alias=True) for frame in self.stack]
        else:
            data.pop("stack", None)
        if has_trace(self.trace):
            data["trace"] = self.trace
        else:
            data.pop("trace", None)
        return data

    def to_json(self, indent: int | None = None) -> str:
        return to_json(self.to_dict(), indent=indent, fallback=str).decode()

    @classmethod
    def from_streamed(cls, streamed: StreamedError) -> TracedError:
        # Only the message survives; the original error type and chain are lost.
        return cls(
            err=Exception(streamed.error),
            stack=list(streamed.stack),
            status_code=streamed.status_code,
            trace=streamed.trace,
            properties=dict(streamed.model_extra or {}),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TracedError:
        return cls.from_streamed(StreamedError.model_validate(data))

    @classmethod
    def from_json(cls, data: str | bytes) -> TracedError:
        return cls.from_streamed(StreamedError.model_validate_json(data))
