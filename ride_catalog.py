"""
Ride catalog model, loader and collection helpers for the maxtime solvers.

A ride catalog is a caret-delimited text file:

    description^cost^time
    again amazing mystical vertigo^37^412.5
    ...

The first line is a header and is ignored. Rows with the wrong number of
fields abort the whole load; rows whose values cannot be used (unparsable
numbers, non-positive cost, empty description) are skipped one by one.

Everything downstream (filtering, the solvers, the reports) works on plain
lists of RideItem.
"""

import math
import numbers
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

FIELD_DELIMITER = "^"
FIELD_COUNT = 3
MAX_PRINTABLE_CACHE = 250


# --- Errors ---
class RideValidationError(ValueError):
    """Raised when a RideItem is constructed with invalid values."""


class RideDatabaseError(ValueError):
    """Raised when a ride catalog is structurally invalid or unreadable."""


class RideInputTooLargeError(ValueError):
    """Raised when exhaustive search is asked to enumerate 64 or more rides."""


class DPTableTooLargeError(MemoryError):
    """Raised when the dynamic programming table cannot be allocated."""

    def __init__(self, rows, cols):
        super().__init__(f"cannot allocate DP table of {rows} x {cols} cells")
        self.rows = rows
        self.cols = cols


# --- Model ---
@dataclass(frozen=True)
class RideItem:
    """
    One ride available for purchase.

    Attributes
    ----------
    description : str
        Human-readable name, e.g. "new enchanted world". Non-empty.
    cost : int
        Ride cost in whole dollars. Strictly positive.
    time : float
        Ride time in minutes. Expected to be non-negative.
    """
    description: str
    cost: int
    time: float

    def __post_init__(self) -> None:
        if not self.description:
            raise RideValidationError("RideItem.description must be non-empty.")
        if isinstance(self.cost, bool) or not isinstance(self.cost, numbers.Integral):
            raise RideValidationError(
                f"RideItem[{self.description}] cost must be an integer, got {self.cost!r}."
            )
        if self.cost <= 0:
            raise RideValidationError(f"RideItem[{self.description}] cost must be > 0.")
        time_value = float(self.time)
        if math.isnan(time_value):
            raise RideValidationError(f"RideItem[{self.description}] time must be a number.")
        # frozen: normalise numpy scalars to builtins
        object.__setattr__(self, "cost", int(self.cost))
        object.__setattr__(self, "time", time_value)


# --- Loader ---
def _parse_number(field: str) -> Optional[float]:
    try:
        value = float(field)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def load_ride_database(path: str, strict: bool = False) -> Optional[List[RideItem]]:
    """
    Load all the valid rides from a caret-delimited catalog.

    Rows with unusable values are skipped. A row with the wrong field count,
    or a file that cannot be opened, fails the whole load: the reason is
    logged and None is returned (or RideDatabaseError raised when strict).
    """
    def fail(message):
        logger.error("Failed to load ride database: %s", message)
        if strict:
            raise RideDatabaseError(message)
        return None

    try:
        f = open(path, "r", encoding="utf-8")
    except OSError as e:
        message = f"Cannot open file: {path}"
        logger.error("Failed to load ride database: %s", message)
        if strict:
            raise RideDatabaseError(message) from e
        return None

    rides: List[RideItem] = []
    skipped = 0
    line_number = 0
    with f:
        try:
            for line_number, raw in enumerate(f, start=1):
                # first line is a header row
                if line_number == 1:
                    continue
                # a blank row has one empty field and fails the count check
                line = raw.rstrip("\r\n")

                fields = line.split(FIELD_DELIMITER)
                if len(fields) != FIELD_COUNT:
                    return fail(
                        f"Invalid field count at line {line_number}; "
                        f"want {FIELD_COUNT} but got {len(fields)}\nLine: {line}"
                    )

                description, cost_field, time_field = fields
                cost = _parse_number(cost_field)
                time_value = _parse_number(time_field)
                if cost is None or time_value is None:
                    logger.debug("line %d: unparsable number, skipped: %r", line_number, line)
                    skipped += 1
                    continue
                if not cost.is_integer() or cost <= 0 or not description:
                    logger.debug("line %d: invalid ride values, skipped: %r", line_number, line)
                    skipped += 1
                    continue

                rides.append(RideItem(description, int(cost), time_value))
        except UnicodeDecodeError as e:
            # decoding is buffered, so the bad bytes are at or after this line
            return fail(f"Cannot decode {path} after line {line_number}: {e}")

    logger.info("Loaded %d rides from %s (%d rows skipped)", len(rides), path, skipped)
    return rides


# --- Collection helpers ---
def sum_ride_vector(rides: Sequence[RideItem]) -> Tuple[int, float]:
    """Return (total_cost, total_time) of the rides; (0, 0.0) when empty."""
    total_cost = 0
    total_time = 0.0
    for ride in rides:
        total_cost += ride.cost
        total_time += ride.time
    return total_cost, total_time


def filter_ride_vector(source: Sequence[RideItem], min_time: float, max_time: float,
                       total_size: int) -> List[RideItem]:
    """
    Return the first total_size rides of source whose time lies in
    [min_time, max_time], in source order.

    Used to drop degenerate rides (pass min_time > 0 to drop rides with no
    time) and to keep exhaustive search inputs small.
    """
    result: List[RideItem] = []
    if total_size <= 0:
        return result
    for ride in source:
        if min_time <= ride.time <= max_time:
            result.append(ride)
            if len(result) >= total_size:
                break
    return result


# --- Reports ---
def format_ride_vector(rides: Sequence[RideItem]) -> str:
    lines = ["*** ride Vector ***"]
    if not rides:
        lines.append("[empty ride list]")
        return "\n".join(lines)

    for ride in rides:
        lines.append(
            f"Ye olde {ride.description} ==> Cost of {ride.cost} dollars"
            f"; time points = {ride.time:g}"
        )
    total_cost, total_time = sum_ride_vector(rides)
    lines.append(f"> Grand total cost: {total_cost} dollars")
    lines.append(f"> Grand total time: {total_time:g}")
    return "\n".join(lines)


def print_ride_vector(rides: Sequence[RideItem]) -> None:
    print(format_ride_vector(rides))


def format_2d_cache(cache) -> str:
    """
    Render a DP table (numpy array or list of rows) as text.
    Refuses tables with more than MAX_PRINTABLE_CACHE rows or columns.
    """
    lines = ["*** 2D Cache ***"]
    n_rows = len(cache)
    n_cols = len(cache[0]) if n_rows else 0
    if n_rows == 0 or n_cols == 0:
        lines.append("[empty]")
    elif n_rows > MAX_PRINTABLE_CACHE or n_cols > MAX_PRINTABLE_CACHE:
        lines.append("[too large]")
    else:
        for row in cache:
            lines.append("".join(f"{float(value):>5g}" for value in row))
    return "\n".join(lines)


def print_2d_cache(cache) -> None:
    print(format_2d_cache(cache))
