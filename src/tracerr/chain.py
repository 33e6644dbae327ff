from __future__ import annotations

from collections.abc import Iterator, Sequence
from typing import TypeVar

E = TypeVar("E", bound=BaseException)


class WrappedError(Exception):
    """An error with its own message that wraps zero or more other errors."""

    def __init__(self, message: str, *errors: BaseException) -> None:
        super().__init__(message, *errors)
        self.message = message
        self.errors = errors
        if len(errors) == 1:
            self.__cause__ = errors[0]

    def __str__(self) -> str:
        return self.message

    def unwrap(self) -> BaseException | None:
        if len(self.errors) == 1:
            return self.errors[0]
        return None


class JoinedError(ExceptionGroup):
    """Several independent errors aggregated into one."""

    def __new__(cls, errors: Sequence[Exception]) -> JoinedError:
        return super().__new__(cls, "joined errors", errors)

    def __str__(self) -> str:
        return "\n".join(str(exc) for exc in self.exceptions)

    def derive(self, excs: Sequence[Exception]) -> JoinedError:  # type: ignore[override]
        return JoinedError(excs)


def unwrap(err: BaseException | None) -> BaseException | None:
    """Return the error directly wrapped by *err*, one layer down."""
    if err is None or isinstance(err, BaseExceptionGroup):
        return None
    method = getattr(err, "unwrap", None)
    if callable(method):
        return method()
    return err.__cause__


def _children(err: BaseException) -> Sequence[BaseException]:
    if isinstance(err, BaseExceptionGroup):
        return err.exceptions
    if isinstance(err, WrappedError):
        return err.errors
    inner = unwrap(err)
    return () if inner is None else (inner,)


def walk(err: BaseException | None) -> Iterator[BaseException]:
    """Yield *err* and every error it wraps, depth first."""
    pending = [] if err is None else [err]
    seen: set[int] = set()
    while pending:
        current = pending.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        pending.extend(reversed(_children(current)))


def is_(err: BaseException | None, target: BaseException | None) -> bool:
    """Tell whether *target* appears anywhere in the chain of *err*."""
    if err is None or target is None:
        return err is target
    return any(node is target or node == target for node in walk(err))


def as_(err: BaseException | None, cls: type[E]) -> E | None:
    """Return the first error in the chain of *err* that is a *cls*."""
    for node in walk(err):
        if isinstance(node, cls):
            return node
    return None
