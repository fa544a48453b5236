"""
Solvers for the ride time maximization problem (0/1 knapsack).

Among the rides whose total dollar cost fits within a budget, choose the
selection whose total time is greatest.

Two solvers are provided:
- dynamic_max_time:    O(n * budget) dynamic programming with back-trace.
- exhaustive_max_time: O(2^n * n) bitmask enumeration, used as an oracle
                       for small inputs (fewer than 64 rides).

Both take (rides, total_cost) and return a list of RideItem. The uniform
interface solve(method, rides, total_cost) wraps either of them and returns:

1.  selection (List[RideItem]): rides chosen.
2.  total_time (float): total time of the selection.
3.  logs (Dict): message, runtime, totals and sanity checks of the run.
"""

import sys
import time
import math
import operator
import logging
import numpy as np
from typing import List, Dict, Any, Tuple, Optional, Sequence

from ride_catalog import (
    RideItem,
    RideInputTooLargeError,
    DPTableTooLargeError,
    filter_ride_vector,
    load_ride_database,
    print_ride_vector,
    sum_ride_vector,
)

logger = logging.getLogger(__name__)

# bitmask enumeration must fit a 64-bit unsigned counter
MAX_EXHAUSTIVE_SIZE = 63
DEFAULT_MEMORY_GUARD = 2e7

# --- compatibility decorator: accept instance=... or rides+total_cost ---
from functools import wraps

def accept_instance(func):
    """
    Decorator that allows calling solver(instance=inst, ...) where inst is a dict
    with keys 'rides' and 'budget' (as built by ride_data_generator). If
    'instance' is present it sets kwargs['rides'] and kwargs['total_cost']
    before calling the wrapped function, unless they were given explicitly.
    """
    @wraps(func)
    def wrapper(*args, **kwargs):
        inst = kwargs.pop('instance', None)
        if inst is not None:
            if 'rides' not in kwargs:
                kwargs['rides'] = inst.get('rides')
            if 'total_cost' not in kwargs:
                kwargs['total_cost'] = inst.get('budget')
        return func(*args, **kwargs)
    return wrapper
# ----------------------------------------------------------------------

def _base_logs(message, runtime, final_value=None, final_weight=None,
               solution_size=None, params=None, extra=None,
               capacity=None, strict=False):
    """
    Standardized logs for solvers with sanity checks.

    Args:
      message (str): human readable status.
      runtime (float): elapsed seconds.
      final_value (float|None): total time of the returned selection.
      final_weight (int|None): total dollar cost of the returned selection.
      solution_size (int|None): number of rides in returned selection.
      params (dict|None): solver parameters for reproducibility.
      extra (dict|None): any extra fields.
      capacity (int|float|None): budget; when provided we check final_weight <= capacity.
      strict (bool): if True, raise AssertionError on sanity violation (useful for tests). Default False.

    Returns:
      dict: structured log containing inputs above plus 'sanity_warnings' (list) and 'infeasible' (bool).
    """
    logs = {
        "message": str(message),
        "runtime": float(runtime) if runtime is not None else None,
        "final_value": None if final_value is None else float(final_value),
        "final_weight": None if final_weight is None else int(final_weight),
        "solution_size": None if solution_size is None else int(solution_size),
        "params": params or {},
        "extra": extra or {},
        "timestamp": time.time(),
        "sanity_warnings": [],
        "infeasible": False
    }

    # 1) final_value must be finite (not inf/-inf/nan)
    if logs["final_value"] is not None and not math.isfinite(logs["final_value"]):
        msg = f"final_value is not finite ({logs['final_value']})"
        if strict:
            raise AssertionError(msg)
        logs["sanity_warnings"].append(msg)

    # 2) final_weight vs budget check
    if logs["final_weight"] is not None and capacity is not None:
        if logs["final_weight"] > capacity:
            msg = f"final_weight ({logs['final_weight']}) exceeds budget ({capacity})"
            if strict:
                raise AssertionError(msg)
            # keep the observed value, only flag it
            logs["sanity_warnings"].append(msg + " -> marked infeasible in logs")
            logs["infeasible"] = True

    for msg in logs["sanity_warnings"]:
        logger.warning("%s: %s", message, msg)

    return logs


# ==============================================================================
# --- Exhaustive search ---
# ==============================================================================

@accept_instance
def exhaustive_max_time(rides: Sequence[RideItem], total_cost: float) -> List[RideItem]:
    """
    Among all subsets of rides, return the one whose cost fits within
    total_cost and whose total time is greatest.

    Subsets are enumerated as bitmasks 0 .. 2^n - 1 (bit j selects rides[j]);
    a candidate replaces the best only when its time is strictly greater, so
    the first optimum in bitmask order wins. The empty selection is returned
    when nothing non-empty is both affordable and better.

    Raises RideInputTooLargeError for 64 or more rides.
    """
    rides = list(rides)
    n = len(rides)
    if n > MAX_EXHAUSTIVE_SIZE:
        raise RideInputTooLargeError(
            f"exhaustive search supports at most {MAX_EXHAUSTIVE_SIZE} rides, got {n}"
        )

    best: Optional[List[RideItem]] = None
    best_time = 0.0

    for bits in range(1 << n):
        candidate = [rides[j] for j in range(n) if (bits >> j) & 1]
        candidate_cost, candidate_time = sum_ride_vector(candidate)

        if candidate_cost <= total_cost:
            if best is None or candidate_time > best_time:
                best = candidate
                best_time = candidate_time

    logger.debug("exhaustive: n=%d, %d subsets examined, best time=%s", n, 1 << n, best_time)
    return best if best is not None else []


# ==============================================================================
# --- Dynamic programming ---
# ==============================================================================

def _as_budget(total_cost) -> int:
    try:
        budget = operator.index(total_cost)
    except TypeError:
        raise ValueError(f"DP budget must be an integer, got {total_cost!r}") from None
    if budget < 0:
        raise ValueError(f"DP budget must be >= 0, got {budget}")
    return budget


def build_dp_cache(rides: Sequence[RideItem], total_cost: int,
                   memory_guard: float = DEFAULT_MEMORY_GUARD) -> np.ndarray:
    """
    Build the (n+1) x (total_cost+1) table of best achievable time.

    cache[i, b] is the best time using the first i rides with b dollars:
    cache[0, :] = 0, and a ride is only taken when that strictly improves
    on leaving it out.
    """
    rides = list(rides)
    budget = _as_budget(total_cost)
    n = len(rides)

    approx_cells = (n + 1) * (budget + 1)
    if approx_cells > memory_guard:
        logger.warning(
            "DP large: approx cells=%d exceeds memory_guard=%d.",
            approx_cells, memory_guard
        )

    try:
        cache = np.zeros((n + 1, budget + 1), dtype=np.float64)
    except (MemoryError, ValueError) as e:
        logger.error("Cannot allocate DP table of %d x %d cells: %s", n + 1, budget + 1, e)
        raise DPTableTooLargeError(n + 1, budget + 1) from e

    for i, ride in enumerate(rides, start=1):
        prev = cache[i - 1]
        row = cache[i]
        row[:] = prev
        w = ride.cost
        if w > budget:
            continue
        # row-at-a-time form of max(cache[i-1, b], cache[i-1, b-w] + time) for b >= w
        take = prev[:budget + 1 - w] + ride.time
        np.maximum(prev[w:], take, out=row[w:])

    return cache


@accept_instance
def dynamic_max_time(rides: Sequence[RideItem], total_cost: int,
                     return_cache: bool = False,
                     memory_guard: float = DEFAULT_MEMORY_GUARD):
    """
    Compute the optimal set of rides with dynamic programming.

    The selection is recovered by walking the table from (n, total_cost)
    back to row 0: ride i is taken iff cache[i, b] != cache[i-1, b], so ties
    leave the ride out. Rides come back in back-trace order, i.e. reverse
    of the input order.

    Returns the selection, or (selection, cache) when return_cache is True.
    """
    rides = list(rides)
    cache = build_dp_cache(rides, total_cost, memory_guard=memory_guard)

    selection: List[RideItem] = []
    b = cache.shape[1] - 1
    for i in range(len(rides), 0, -1):
        if cache[i, b] != cache[i - 1, b]:
            ride = rides[i - 1]
            selection.append(ride)
            b -= ride.cost

    logger.debug("dynamic: n=%d, budget=%d, best time=%s", len(rides), cache.shape[1] - 1,
                 cache[-1, -1])
    if return_cache:
        return selection, cache
    return selection


# ==============================================================================
# --- Solver interface ---
# ==============================================================================

SOLVERS = {
    "exhaustive": exhaustive_max_time,
    "dynamic": dynamic_max_time,
}

@accept_instance
def solve(method: str, rides: Sequence[RideItem], total_cost,
          strict: bool = False) -> Tuple[List[RideItem], float, Dict[str, Any]]:
    """
    Run the named solver and return (selection, total_time, logs).

    Solver errors (RideInputTooLargeError, DPTableTooLargeError, bad budget)
    propagate unchanged; nothing partial is returned.
    """
    try:
        solver = SOLVERS[method]
    except KeyError:
        raise ValueError(f"unknown method {method!r}; known: {sorted(SOLVERS)}") from None

    rides = list(rides)
    start = time.perf_counter()
    selection = solver(rides, total_cost)
    runtime = time.perf_counter() - start

    selection_cost, selection_time = sum_ride_vector(selection)
    logs = _base_logs(
        f"{method} finished",
        runtime,
        final_value=selection_time,
        final_weight=selection_cost,
        solution_size=len(selection),
        params={"method": method, "n_rides": len(rides), "budget": total_cost},
        capacity=total_cost,
        strict=strict
    )
    return selection, float(selection_time), logs


def main(argv=None) -> int:
    """Usage: maxtime_solvers.py CATALOG BUDGET [dynamic|exhaustive]"""
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) not in (2, 3):
        print(main.__doc__, file=sys.stderr)
        return 2

    path, budget = argv[0], int(argv[1])
    method = argv[2] if len(argv) == 3 else "dynamic"

    rides = load_ride_database(path)
    if rides is None:
        return 1
    # rides with zero or negative time never help and only slow exhaustive search
    rides = filter_ride_vector(rides, float(np.nextafter(0.0, 1.0)), math.inf, len(rides))

    try:
        selection, total_time, logs = solve(method, rides, budget)
    except RideInputTooLargeError as e:
        logger.error("%s; use the dynamic method for this catalog", e)
        return 1
    print_ride_vector(selection)
    logger.info("%s in %.3fs", logs["message"], logs["runtime"])
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    sys.exit(main())
