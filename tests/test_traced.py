import copy
import json
import pickle

import pytest
from pydantic import ValidationError

from tracerr import ZERO_TRACE, StackFrame, TracedError, new

FRAME = StackFrame(function="app.handler", file="/srv/app.py", line=7)


class Opaque:
    def __str__(self) -> str:
        return "opaque-value"


def test_str_is_cause_message() -> None:
    err = TracedError(err=ValueError("bad"), status_code=400, properties={"k": "v"})
    assert str(err) == "bad"
    assert "status" not in str(err)


def test_repr() -> None:
    err = TracedError(err=ValueError("bad"), status_code=400, stack=[FRAME])
    assert repr(err) == "TracedError('bad', status_code=400, frames=1)"


def test_verbose_full(trace_hex: str) -> None:
    err = TracedError(
        err=ValueError("bad"),
        stack=[FRAME],
        status_code=404,
        trace=trace_hex,
        properties={"user": "alice", "attempt": 3},
    )
    assert err.verbose() == "\n".join(
        [
            "bad",
            "statusCode=404",
            f"trace={trace_hex}",
            "user=alice",
            "attempt=3",
            "",
            "- app.handler",
            "  /srv/app.py:7",
        ]
    )


def test_verbose_hides_defaults() -> None:
    for status in (0, 500):
        err = TracedError(err=ValueError("bad"), status_code=status, trace=ZERO_TRACE)
        assert err.verbose() == "bad"


def test_to_dict_omits_empty_fields() -> None:
    err = TracedError(err=ValueError("bad"), trace=ZERO_TRACE)
    assert err.to_dict() == {"error": "bad"}


def test_to_dict_flattens_properties(trace_hex: str) -> None:
    err = TracedError(
        err=ValueError("bad"),
        stack=[FRAME],
        status_code=409,
        trace=trace_hex,
        properties={"user": "alice"},
    )
    assert err.to_dict() == {
        "user": "alice",
        "error": "bad",
        "statusCode": 409,
        "trace": trace_hex,
        "stack": [{"func": "app.handler", "file": "/srv/app.py", "line": 7}],
    }


def test_to_dict_reserved_keys_win() -> None:
    err = TracedError(
        err=ValueError("bad"),
        properties={"error": "shadow", "statusCode": 1, "stack": "x", "trace": "y"},
    )
    assert err.to_dict() == {"error": "bad"}


def test_to_json_stringifies_unknown_values() -> None:
    err = TracedError(err=ValueError("bad"), status_code=500, properties={"obj": Opaque()})
    assert json.loads(err.to_json()) == {
        "obj": "opaque-value",
        "error": "bad",
        "statusCode": 500,
    }


def test_to_json_indent() -> None:
    err = TracedError(err=ValueError("bad"))
    assert err.to_json(indent=2) == '{\n  "error": "bad"\n}'


def test_round_trip_is_lossy_on_cause(trace_hex: str) -> None:
    original = KeyError("missing")
    err = new("lookup failed", original, 404, trace_hex, "user", "alice")

    restored = TracedError.from_json(err.to_json())

    assert str(restored) == str(err)
    assert restored.status_code == 404
    assert restored.trace == trace_hex
    assert restored.properties == {"user": "alice"}
    assert restored.stack == err.stack
    assert type(restored.err) is Exception
    assert restored.err is not original


def test_from_dict_restores_properties() -> None:
    restored = TracedError.from_dict({"error": "bad", "retry": True, "count": 2})
    assert str(restored) == "bad"
    assert restored.status_code == 0
    assert restored.trace == ""
    assert restored.stack == []
    assert restored.properties == {"retry": True, "count": 2}


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        '{"statusCode": 400}',
        '{"error": "bad", "stack": [{"file": "x.py"}]}',
        '{"error": "bad", "statusCode": -3}',
        '{"error": "bad", "trace": "not-hex"}',
        '{"error": "bad", "trace": "abc123"}',
    ],
)
def test_from_json_rejects_invalid_payload(payload: str) -> None:
    with pytest.raises(ValidationError):
        TracedError.from_json(payload)


def test_from_json_accepts_uppercase_trace() -> None:
    trace = "ABCDEF0123456789" * 2
    assert TracedError.from_json(f'{{"error": "bad", "trace": "{trace}"}}').trace == trace


def test_format_spec_pads_message() -> None:
    err = TracedError(err=ValueError("bad"), status_code=400)
    assert f"{err:>10}" == "       bad"
    assert f"{err:<5}|" == "bad  |"
    assert f"{err:^7}" == "  bad  "
    assert f"{err:s}" == f"{err:v}" == f"{err}" == "bad"


def test_pickle_keeps_fields(trace_hex: str) -> None:
    err = new("boom", 400, trace_hex, "user", "alice")
    restored = pickle.loads(pickle.dumps(err))
    assert isinstance(restored, TracedError)
    assert str(restored) == "boom"
    assert restored.status_code == 400
    assert restored.trace == trace_hex
    assert restored.properties == {"user": "alice"}
    assert restored.stack == err.stack
    assert restored.__cause__ is restored.err


@pytest.mark.parametrize("clone", [copy.copy, copy.deepcopy])
def test_copy_keeps_fields(clone) -> None:
    err = TracedError(
        err=ValueError("bad"), stack=[FRAME], status_code=404, properties={"k": "v"}
    )
    cloned = clone(err)
    assert cloned is not err
    assert cloned.verbose() == err.verbose()
    assert isinstance(cloned.err, ValueError)
