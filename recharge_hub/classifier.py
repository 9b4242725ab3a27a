from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict


class Outcome(str, Enum):
    SUCCESS = "SUCCESS"
    PROCESSING = "PROCESSING"
    FAILED = "FAILED"
    # probing control signals, never returned to the caller
    UNRECOGNIZED = "UNRECOGNIZED"
    UNREACHABLE = "UNREACHABLE"
    NOT_FOUND = "NOT_FOUND"


TERMINAL_OUTCOMES = frozenset({Outcome.SUCCESS, Outcome.PROCESSING, Outcome.FAILED})


class StatusRule(BaseModel):
    model_config = ConfigDict(frozen=True)

    primary: str
    # None matches any secondary value, including an absent one
    secondary: Optional[str] = None
    outcome: Outcome

    def matches(self, primary: str, secondary: Optional[str]) -> bool:
        if self.primary != primary:
            return False
        return self.secondary is None or self.secondary == secondary


class OutcomeSchema(BaseModel):
    """
    Describes how one provider signals the result of a call.

    Rules are evaluated in order. A payload that carries the primary field but
    matches no rule is FAILED; a payload without the primary field is UNRECOGNIZED.
    """

    model_config = ConfigDict(frozen=True)

    primary_field: str
    secondary_field: str
    rules: tuple[StatusRule, ...]


def _field_value(payload: Mapping[str, Any], name: str) -> Optional[str]:
    value = payload.get(name)
    if value is None:
        return None
    return str(value).strip()


def classify(payload: Any, schema: OutcomeSchema) -> Outcome:
    if not isinstance(payload, Mapping):
        return Outcome.UNRECOGNIZED
    primary = _field_value(payload, schema.primary_field)
    if primary is None:
        return Outcome.UNRECOGNIZED
    secondary = _field_value(payload, schema.secondary_field)
    for rule in schema.rules:
        if rule.matches(primary, secondary):
            return rule.outcome
    return Outcome.FAILED
