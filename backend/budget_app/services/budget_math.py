"""
Budget records and the pure arithmetic derived from them
"""
import math
import re
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

Number = Union[int, float]

BUDGET_FIELDS = ("members", "duesPerMember", "expenses")

# Marks a key that was not present in a request body
MISSING = object()

_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_PREFIXED_INT_RE = re.compile(r"^0(?P<base>[xXoObB])(?P<digits>[0-9a-fA-F]+)$")
_PREFIX_BASES = {"x": 16, "o": 8, "b": 2}
_MAX_SAFE_INTEGER = 2 ** 53


def normalize_number(value: float) -> Number:
    """Return integral finite floats as int so they serialize as 40, not 40.0"""
    if isinstance(value, float) and math.isfinite(value) and value.is_integer() and abs(value) <= _MAX_SAFE_INTEGER:
        return int(value)
    return value


def coerce_number(value: Any) -> Number:
    """
    Coerce a decoded JSON value to a number the way a loose JSON client would.

    - missing key -> NaN
    - null -> 0, booleans -> 0/1
    - numbers pass through
    - strings are stripped; empty -> 0; decimal, Infinity and 0x/0o/0b
      literals are parsed; anything else -> NaN
    - lists read as their single element: [] -> 0, [40] -> 40, ["7"] -> 7,
      [null] -> 0; longer lists, booleans inside lists and objects -> NaN
    """
    if value is MISSING:
        return math.nan
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return normalize_number(value)
    if isinstance(value, str):
        return _parse_numeric_string(value)
    if isinstance(value, list):
        return _list_as_number(value)
    return math.nan


def _list_as_number(items: list) -> Number:
    # A list reads as the text of its elements joined by commas
    if not items:
        return 0
    if len(items) > 1:
        return math.nan
    item = items[0]
    if item is None:
        return 0
    if isinstance(item, bool):
        return math.nan
    if isinstance(item, (int, float, str, list)):
        return coerce_number(item)
    return math.nan


def _parse_numeric_string(raw: str) -> Number:
    text = raw.strip()
    if not text:
        return 0
    if text in ("Infinity", "+Infinity"):
        return math.inf
    if text == "-Infinity":
        return -math.inf
    if _DECIMAL_RE.match(text):
        return normalize_number(float(text))
    prefixed = _PREFIXED_INT_RE.match(text)
    if prefixed:
        base = _PREFIX_BASES[prefixed.group("base").lower()]
        try:
            return int(prefixed.group("digits"), base)
        except ValueError:
            return math.nan
    return math.nan


def is_finite(value: Number) -> bool:
    try:
        return math.isfinite(value)
    except OverflowError:
        # ints beyond float range
        return False


def _json_number(value: Number) -> Optional[Number]:
    # Non-finite numbers have no JSON representation
    return value if is_finite(value) else None


class Budget(BaseModel):
    """The stored budget record of one organizational unit"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    members: Number = Field(..., description="Member count")
    dues_per_member: Number = Field(..., alias="duesPerMember", description="Dues per member per period")
    expenses: Number = Field(..., description="Aggregate expenses for the period")

    def to_dict(self) -> Dict[str, Number]:
        return self.model_dump(by_alias=True)


class BudgetOverrides(BaseModel):
    """Hypothetical values for a what-if simulation; unset fields keep the stored value"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    members: Optional[Number] = None
    dues_per_member: Optional[Number] = Field(default=None, alias="duesPerMember")
    expenses: Optional[Number] = None


class BudgetSummary(BaseModel):
    """Derived view of a budget; never stored"""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    members: Number
    dues_per_member: Number = Field(..., alias="duesPerMember")
    total_revenue: Number = Field(..., alias="totalRevenue")
    expenses: Number
    balance: Number

    def to_dict(self) -> Dict[str, Optional[Number]]:
        return {key: _json_number(value) for key, value in self.model_dump(by_alias=True).items()}


def summarize(budget: Budget) -> BudgetSummary:
    """Compute revenue and balance for a budget"""
    total_revenue = budget.members * budget.dues_per_member
    return BudgetSummary(
        members=budget.members,
        dues_per_member=budget.dues_per_member,
        total_revenue=normalize_number(total_revenue),
        expenses=budget.expenses,
        balance=normalize_number(total_revenue - budget.expenses),
    )


def simulate(budget: Budget, overrides: BudgetOverrides) -> BudgetSummary:
    """Summarize `budget` with every field set in `overrides` substituted"""
    merged = Budget(
        members=budget.members if overrides.members is None else overrides.members,
        dues_per_member=(
            budget.dues_per_member if overrides.dues_per_member is None else overrides.dues_per_member
        ),
        expenses=budget.expenses if overrides.expenses is None else overrides.expenses,
    )
    return summarize(merged)
