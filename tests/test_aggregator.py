import pytest
from pydantic import ValidationError

from assethook.aggregator import aggregate
from assethook.models import Message, Result


def msg(filename: str, message: str) -> Message:
    return Message(filename=filename, message=message)


def test_aggregate_empty():
    assert aggregate({}) == Result(success=True, messages={})


def test_aggregate_services_without_messages():
    result = aggregate({"ns/a/": [], "ns/b/": []})
    assert result.success is True
    assert result.messages == {}


def test_aggregate_groups_by_filename_in_service_order():
    result = aggregate(
        {
            "ns/a/": [msg("x", "a1"), msg("y", "a2"), msg("x", "a3")],
            "ns/b/": [msg("y", "b1")],
            "ns/c/": [],
            "ns/d/": [msg("x", "d1")],
        }
    )

    assert result.success is False
    assert list(result.messages) == ["x", "y"]
    assert [m.message for m in result.messages["x"]] == ["a1", "a3", "d1"]
    assert [m.message for m in result.messages["y"]] == ["a2", "b1"]


def test_result_is_immutable():
    result = aggregate({"ns/a/": [msg("x", "bad")]})
    with pytest.raises(ValidationError):
        result.success = True  # type: ignore[misc]


def test_successful_result_cannot_carry_messages():
    with pytest.raises(ValidationError):
        Result(success=True, messages={"x": [msg("x", "bad")]})


def test_result_messages_are_read_only():
    result = aggregate({"ns/a/": [msg("x", "bad")]})

    with pytest.raises(TypeError):
        result.messages["y"] = (msg("y", "added"),)  # type: ignore[index]
    assert isinstance(result.messages["x"], tuple)
    assert result.model_dump() == {
        "success": False,
        "messages": {"x": [{"filename": "x", "message": "bad"}]},
    }
