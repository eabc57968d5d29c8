"""
Typed badge criteria.

Each badge stores `criteria_type` plus a JSON `criteria_payload`. The pair is
parsed once, at load time, into one of the frozen models below. Anything that
does not parse (bad JSON, missing fields, unknown type) raises
InvalidCriteriaError and the badge is treated as inert.

  first_time   {"action": "memory_created"}
  count        {"type": "adventure", "count": 3}
  tag          {"tag": "hiking"}
  location     {"location_type": "city", "location_name": "Paris", "visit_count": 2}
               {"location_type": "state" | "country", "location_name": ...}   geocoding
               {"states": 10}                                                 legacy, geocoding
  state_count  {"states": 10}                                                 geocoding
  completion   {"action": "complete_journey_plan"}

Criteria that need geocoding are accepted and kept as explicit cases; they
always evaluate to False until a geocoder exists.
"""
from __future__ import annotations

import enum
from typing import ClassVar, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from travelog.core.errors import InvalidCriteriaError


class CriteriaKind(str, enum.Enum):
    first_time = "first_time"
    count = "count"
    tag = "tag"
    location = "location"
    state_count = "state_count"
    completion = "completion"


class LocationType(str, enum.Enum):
    city = "city"
    state = "state"
    country = "country"


COMPLETE_JOURNEY_PLAN = "complete_journey_plan"

# Kinds with a monotonic partial metric; only these get BadgeProgress rows.
TRACKABLE_KINDS = frozenset({CriteriaKind.count, CriteriaKind.location})


class _Criteria(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    kind: ClassVar[CriteriaKind]


class FirstTimeCriteria(_Criteria):
    kind: ClassVar[CriteriaKind] = CriteriaKind.first_time

    action: str


class CountCriteria(_Criteria):
    kind: ClassVar[CriteriaKind] = CriteriaKind.count

    memory_type: str = Field(alias="type")
    count: int = Field(ge=1)


class TagCriteria(_Criteria):
    kind: ClassVar[CriteriaKind] = CriteriaKind.tag

    tag: str = Field(min_length=1)


class LocationCriteria(_Criteria):
    kind: ClassVar[CriteriaKind] = CriteriaKind.location

    location_type: Optional[LocationType] = None
    location_name: Optional[str] = None
    visit_count: int = Field(default=1, ge=1)
    states: Optional[int] = None

    @model_validator(mode="after")
    def check_target(self) -> "LocationCriteria":
        if (self.location_type and self.location_name) or self.states is not None:
            return self
        raise ValueError("location criteria needs location_type + location_name, or states")

    @property
    def requires_geocoding(self) -> bool:
        """True for state/country targets and the legacy bare `states` field."""
        if self.location_type and self.location_name:
            return self.location_type != LocationType.city
        return True


class StateCountCriteria(_Criteria):
    kind: ClassVar[CriteriaKind] = CriteriaKind.state_count

    states: Optional[int] = None

    @property
    def requires_geocoding(self) -> bool:
        return True


class CompletionCriteria(_Criteria):
    kind: ClassVar[CriteriaKind] = CriteriaKind.completion

    action: str


Criteria = Union[
    FirstTimeCriteria,
    CountCriteria,
    TagCriteria,
    LocationCriteria,
    StateCountCriteria,
    CompletionCriteria,
]

_MODELS: dict[CriteriaKind, type[_Criteria]] = {
    CriteriaKind.first_time: FirstTimeCriteria,
    CriteriaKind.count: CountCriteria,
    CriteriaKind.tag: TagCriteria,
    CriteriaKind.location: LocationCriteria,
    CriteriaKind.state_count: StateCountCriteria,
    CriteriaKind.completion: CompletionCriteria,
}


def parse_criteria(criteria_type: str, payload: Optional[str]) -> Criteria:
    """Parse a badge's raw criteria columns. Raises InvalidCriteriaError."""
    try:
        kind = CriteriaKind(criteria_type)
    except ValueError:
        raise InvalidCriteriaError(str(criteria_type), "unknown criteria type") from None

    if payload is None or not payload.strip():
        raise InvalidCriteriaError(kind.value, "empty criteria payload")

    try:
        return _MODELS[kind].model_validate_json(payload)
    except ValidationError as exc:
        reasons = "; ".join(err["msg"] for err in exc.errors())
        raise InvalidCriteriaError(kind.value, reasons) from exc
