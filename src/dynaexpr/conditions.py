from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .attributes import ExpressionAttributeMap
from .errors import FieldIssue, ValidationError


@dataclass(frozen=True)
class Condition:
    expression: str
    attributes: ExpressionAttributeMap


def build_status_condition(statuses: Sequence[str], *, attribute: str = "status") -> Condition:
    """Build a membership condition over a status-like attribute.

    A single status yields ``#status = :status0``; several yield
    ``#status IN (:status0, :status1, ...)``.
    """
    if not statuses:
        raise ValidationError("statuses cannot be empty", [FieldIssue("statuses", "at least one status is required")])
    if len(statuses) > 100:
        raise ValidationError("too many statuses", [FieldIssue("statuses", "IN supports maximum 100 values")])

    name_ref = f"#{attribute}"
    values = {f":{attribute}{i}": status for i, status in enumerate(statuses)}
    refs = list(values)

    if len(refs) == 1:
        expression = f"{name_ref} = {refs[0]}"
    else:
        expression = f"{name_ref} IN (" + ", ".join(refs) + ")"

    return Condition(
        expression=expression,
        attributes=ExpressionAttributeMap(names={name_ref: attribute}, values=values),
    )
