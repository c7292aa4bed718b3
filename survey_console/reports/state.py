"""
Report Filter State

Holds the filter panel values for the tabular survey report. Every value is
kept as a string exactly as the operator typed or selected it; conversion to
request types happens in the query builder.

Author: Survey Console Team
"""

import logging
from dataclasses import dataclass, field, fields, replace, asdict
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class TriState(Enum):
    """Three-valued filter: no preference, yes or no"""
    UNSET = ""
    TRUE = "true"
    FALSE = "false"

    @classmethod
    def parse(cls, value: str) -> "TriState":
        """Parse the string encoding used by the filter panel ('', 'true', 'false')"""
        try:
            return cls(value)
        except ValueError:
            raise ValueError(f"Invalid tri-state value: {value!r} (expected '', 'true' or 'false')")

    def to_bool(self):
        """Native boolean, or None when unset"""
        if self is TriState.UNSET:
            return None
        return self is TriState.TRUE


SORT_ORDERS = ("asc", "desc")


def _wire(name: str, **kwargs):
    return field(default="", metadata={"wire": name, **kwargs})


@dataclass(frozen=True)
class FilterState:
    """Filter panel values. The `wire` metadata holds the backend parameter name."""
    start_date: str = _wire("startDate", required=True)
    end_date: str = _wire("endDate", required=True)
    q: str = _wire("q")
    survey_status: str = _wire("surveyStatus", choices=("", "successful", "unsuccessful"))
    willing_to_respond: str = _wire("willingToRespond", tri_state=True)
    is_patria_defender: str = _wire("isPatriaDefender", tri_state=True)
    department: str = _wire("department")
    city: str = _wire("city")
    region: str = _wire("region")
    neighborhood: str = _wire("neighborhood")
    gender: str = _wire("gender")
    age_range: str = _wire("ageRange")
    stratum: str = _wire("stratum")
    id_type: str = _wire("idType")
    sort_by: str = _wire("sortBy")
    sort_order: str = field(default="asc", metadata={"wire": "sortOrder", "choices": SORT_ORDERS})

    def has_date_range(self) -> bool:
        return bool(self.start_date) and bool(self.end_date)

    def to_wire(self) -> Dict[str, str]:
        """Field values keyed by backend parameter name"""
        values = asdict(self)
        return {f.metadata["wire"]: values[f.name] for f in fields(self)}


# Attribute name <-> wire name lookups
FIELD_NAMES = {f.metadata["wire"]: f.name for f in fields(FilterState)}
FIELD_NAMES.update({f.name: f.name for f in fields(FilterState)})
TRI_STATE_FIELDS = tuple(f.name for f in fields(FilterState) if f.metadata.get("tri_state"))


def resolve_field(name: str) -> str:
    """Return the attribute name for a wire or attribute field name"""
    try:
        return FIELD_NAMES[name]
    except KeyError:
        raise KeyError(f"Unknown filter field: {name}")


class FilterStore:
    """
    Mutable holder of the current FilterState.

    The state itself is an immutable dataclass; `set` swaps in a copy with one
    field changed. Listeners registered with `on_clear` run after `clear`.
    """

    def __init__(self):
        self._state = FilterState()
        self._clear_listeners: List[Callable[[], None]] = []

    @property
    def state(self) -> FilterState:
        return self._state

    def snapshot(self) -> FilterState:
        return self._state

    def get(self, name: str) -> str:
        return getattr(self._state, resolve_field(name))

    @staticmethod
    def _validated(name: str, value: Optional[str]) -> Tuple[str, str]:
        attr = resolve_field(name)
        value = "" if value is None else str(value)
        meta = next(f.metadata for f in fields(FilterState) if f.name == attr)

        if meta.get("tri_state"):
            TriState.parse(value)
        choices = meta.get("choices")
        if choices and value not in choices:
            raise ValueError(f"Invalid value for {meta['wire']}: {value!r}")
        return attr, value

    def set(self, name: str, value: str) -> FilterState:
        """Overwrite one field. Unknown fields raise KeyError, invalid enum values raise ValueError."""
        return self.update({name: value})

    def update(self, values: Dict[str, Optional[str]]) -> FilterState:
        """
        Overwrite several fields at once.

        Every value is validated before any is applied, so a bad value leaves
        the store unchanged.
        """
        changes = dict(self._validated(name, value) for name, value in values.items())
        changes = {attr: value for attr, value in changes.items() if getattr(self._state, attr) != value}
        if changes:
            self._state = replace(self._state, **changes)
            logger.debug(f"Filters updated: {changes}")
        return self._state

    def tri_state(self, name: str) -> TriState:
        attr = resolve_field(name)
        if attr not in TRI_STATE_FIELDS:
            raise KeyError(f"{name} is not a tri-state filter")
        return TriState.parse(getattr(self._state, attr))

    def on_clear(self, callback: Callable[[], None]):
        self._clear_listeners.append(callback)

    def clear(self) -> FilterState:
        """Reset all fields to defaults and tell dependents to drop their results"""
        self._state = FilterState()
        logger.info("Report filters cleared")
        for callback in self._clear_listeners:
            callback()
        return self._state

    def active_count(self) -> int:
        """Number of non-empty filters, not counting sortOrder (always set)"""
        return sum(
            1 for f in fields(FilterState)
            if f.name != "sort_order" and getattr(self._state, f.name)
        )
