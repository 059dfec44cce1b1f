from __future__ import annotations

import pytest

from dynaexpr.conditions import build_status_condition
from dynaexpr.errors import ValidationError


def test_single_status_uses_equality() -> None:
    cond = build_status_condition(["ACTIVE"])
    assert cond.expression == "#status = :status0"
    assert cond.attributes.names == {"#status": "status"}
    assert cond.attributes.values == {":status0": "ACTIVE"}


def test_many_statuses_use_in() -> None:
    cond = build_status_condition(["A", "B", "C"])
    assert cond.expression == "#status IN (:status0, :status1, :status2)"
    assert cond.attributes.values == {":status0": "A", ":status1": "B", ":status2": "C"}


def test_custom_attribute() -> None:
    cond = build_status_condition(["x"], attribute="state")
    assert cond.expression == "#state = :state0"


def test_empty_and_oversized_lists_are_rejected() -> None:
    with pytest.raises(ValidationError, match="statuses cannot be empty") as excinfo:
        build_status_condition([])
    assert excinfo.value.paths == ("statuses",)

    with pytest.raises(ValidationError, match="too many statuses"):
        build_status_condition([str(i) for i in range(101)])
