"""Lenient parsing of report filters with per-endpoint defaults."""

import re
from dataclasses import dataclass
from typing import Optional

# Value the front-end sends when no state is selected
ALL_STATES = "All States"
# Value the search modal sends when no state is selected
ALL_STATE_IDS = "all"

# Defaults substituted for missing, non-numeric or non-positive input
FILTER_DEFAULTS: dict[str, dict[str, int]] = {
    "stats": {"days": 30},
    "timeseries": {"days": 30},
    "by-location": {"days": 30, "limit": 10},
    "recent-batches": {"limit": 10},
    "batch-details": {"limit": 50},
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def to_int(value: Optional[str], fallback: int) -> int:
    """
    Parse the leading integer of value, or return fallback.

    "12" -> 12, "12abc" -> 12, "abc" -> fallback, None -> fallback.
    Zero and negative numbers also fall back; a window or row count
    below one has no meaning for any report.
    """
    if value is None:
        return fallback
    match = _LEADING_INT.match(str(value))
    if not match:
        return fallback
    parsed = int(match.group(1))
    return parsed if parsed > 0 else fallback


def normalize_state(state: Optional[str]) -> Optional[str]:
    """Return the state name to filter by, or None for "all states"."""
    if state is None:
        return None
    state = state.strip()
    if not state or state == ALL_STATES:
        return None
    return state


def normalize_state_id(state_id: Optional[str]) -> Optional[int]:
    """Return the numeric state id to narrow a search by, or None."""
    if state_id is None:
        return None
    state_id = state_id.strip()
    if not state_id or state_id.lower() == ALL_STATE_IDS:
        return None
    match = _LEADING_INT.match(state_id)
    return int(match.group(1)) if match else None


@dataclass(frozen=True)
class ReportFilters:
    """Resolved filters for one report request."""

    state: Optional[str] = None
    days: Optional[int] = None
    limit: Optional[int] = None

    @classmethod
    def parse(
        cls,
        endpoint: str,
        state: Optional[str] = None,
        days: Optional[str] = None,
        limit: Optional[str] = None,
    ) -> "ReportFilters":
        """Apply the endpoint's defaults from FILTER_DEFAULTS."""
        defaults = FILTER_DEFAULTS[endpoint]
        return cls(
            state=normalize_state(state),
            days=to_int(days, defaults["days"]) if "days" in defaults else None,
            limit=to_int(limit, defaults["limit"]) if "limit" in defaults else None,
        )
