"""
Purpose:
- Generate reproducible ride catalogs and solver instances for the maxtime solvers.
- Supports: seed-based reproducibility, time distributions, positive/negative
  cost-time correlation, budget ratio, batch generation and file output
  (caret-delimited catalog + JSON instance).

Usage:
- import functions or run as script to generate an example batch.

Notes:
- Reproducibility: each instance stores the seed used in meta.
  Regenerating with the same seed + parameters yields identical rides.
- budget_ratio controls hardness: smaller ratios leave fewer rides affordable.
- time_dist simulates different regimes
    > uniform : uniform sampling
    > normal  : bell-curve around mid-range
    > zipf    : few long rides, many short ones
- Correlation:
    > positive correlation: time proportional to cost with gaussian noise
    > negative correlation: time roughly inverse to cost with noise
"""

import os
import json
import random
from typing import List, Tuple, Optional, Dict

from ride_catalog import FIELD_DELIMITER, RideItem

# --- Description vocabulary ---
_PREFIXES = ["again", "new", "a short", "the last", "one more", "super", "grand", "tiny"]
_ADJECTIVES = ["amazing", "enchanted", "mystical", "haunted", "spinning", "wild",
               "golden", "crazy", "frozen", "flying"]
_NOUNS = ["vertigo", "typhoon", "world", "coaster", "carousel", "drop", "river",
          "tower", "galaxy", "speedway", "wheel", "mine train"]

# --- Utilities / RNG ---
def _get_rng(seed: Optional[int]):
    """Return (seed_used, random.Random instance)."""
    if seed is None:
        seed = random.randrange(0, 2**32)
    rng = random.Random(seed)
    return seed, rng

def _sample_description(rng: random.Random) -> str:
    return " ".join([rng.choice(_PREFIXES), rng.choice(_ADJECTIVES),
                     rng.choice(_ADJECTIVES), rng.choice(_NOUNS)])

def _sample_normal(rng: random.Random, mean: float, std: float, low: float, high: float) -> float:
    # draw until inside bounds to avoid extremes
    for _ in range(10):
        val = rng.gauss(mean, std)
        if low <= val <= high:
            return val
    return max(low, min(high, mean))

def _sample_zipf(rng: random.Random, a: float, low: float, high: float) -> float:
    # inverse transform of a Pareto-like tail, then clamp
    x = rng.random()
    pareto = low + (1.0 - x) ** (-1.0 / (a - 1.0)) - 1.0
    return max(low, min(high, pareto))

# --- Catalog generator ---
def generate_catalog(
    n_rides: int,
    cost_range: Tuple[int, int] = (1, 100),
    time_range: Tuple[float, float] = (0.0, 500.0),
    correlation: Optional[str] = None,   # None | 'positive' | 'negative'
    time_dist: str = "uniform",          # 'uniform' | 'normal' | 'zipf'
    seed: Optional[int] = None
) -> Tuple[int, List[RideItem]]:
    """
    Returns (seed_used, rides). Costs are whole dollars drawn uniformly from
    cost_range; times are rounded to two decimals.
    """
    if correlation not in (None, "positive", "negative"):
        raise ValueError("Unknown correlation: " + str(correlation))
    if time_dist not in ("uniform", "normal", "zipf"):
        raise ValueError("Unknown time_dist: " + str(time_dist))

    seed_used, rng = _get_rng(seed)
    clow, chigh = cost_range
    tlow, thigh = time_range

    def sample_time(cost):
        if correlation is None:
            if time_dist == "uniform":
                return rng.uniform(tlow, thigh)
            elif time_dist == "normal":
                mean = (tlow + thigh) / 2.0
                std = max(1.0, (thigh - tlow) / 6.0)
                return _sample_normal(rng, mean, std, tlow, thigh)
            return _sample_zipf(rng, a=1.8, low=tlow, high=thigh)

        cnorm = (cost - clow) / max(1, (chigh - clow))
        if correlation == "positive":
            base = tlow + cnorm * (thigh - tlow)
        else:
            base = tlow + (1.0 - cnorm) * (thigh - tlow)
        noise = rng.gauss(0, 0.08 * (thigh - tlow))
        return max(tlow, min(thigh, base + noise))

    rides = []
    for _ in range(n_rides):
        cost = rng.randint(clow, chigh)
        rides.append(RideItem(_sample_description(rng), cost, round(sample_time(cost), 2)))
    return seed_used, rides

def generate_instance(n_rides: int, budget_ratio: float = 0.5, **catalog_kwargs) -> Dict:
    """
    Returns a dict usable as the `instance=` argument of any solver:
    {
      "meta": { ... seed, params ... },
      "budget": int,
      "rides": [RideItem, ...]
    }
    """
    seed_used, rides = generate_catalog(n_rides, **catalog_kwargs)
    total_cost = sum(r.cost for r in rides)
    meta = {"n_rides": n_rides, "budget_ratio": budget_ratio}
    meta.update(catalog_kwargs)
    meta["seed"] = seed_used
    return {
        "meta": meta,
        "budget": max(0, int(round(total_cost * budget_ratio))),
        "rides": rides
    }

# --- I/O helpers ---
def save_catalog_csv(rides: List[RideItem], path: str):
    """Write rides in the caret-delimited format read by load_ride_database."""
    dirname = os.path.dirname(path)
    if dirname:
        os.makedirs(dirname, exist_ok=True)
    with open(path, "w", encoding="utf8") as f:
        f.write(FIELD_DELIMITER.join(["description", "cost", "time"]) + "\n")
        for r in rides:
            f.write(FIELD_DELIMITER.join([r.description, str(r.cost), repr(r.time)]) + "\n")

def save_instance_json(instance: Dict, path: str):
    dirname = os.path.dirname(path)
    if dirname:
        os.makedirs(dirname, exist_ok=True)
    data = {
        "meta": instance["meta"],
        "budget": instance["budget"],
        "rides": [{"description": r.description, "cost": r.cost, "time": r.time}
                  for r in instance["rides"]]
    }
    with open(path, "w", encoding="utf8") as f:
        json.dump(data, f, indent=2)

def load_instance_json(path: str) -> Dict:
    with open(path, "r", encoding="utf8") as f:
        data = json.load(f)
    data["rides"] = [RideItem(r["description"], r["cost"], r["time"]) for r in data["rides"]]
    return data

# --- Batch generator (multiple scales) ---
def generate_batch(
    ns: List[int],
    output_dir: str = "ride_instances",
    budget_ratio: float = 0.5,
    base_seed: int = 42,
    force_overwrite: bool = False,
    **catalog_kwargs
) -> List[Dict]:
    """
    Generate instances for each n in ns and save them.
    Naming: {output_dir}/rides_n{n}_seed{seed}.json / .csv
    Returns list of metadata records for each instance.
    """
    os.makedirs(output_dir, exist_ok=True)
    records = []
    for idx, n in enumerate(ns):
        seed = (base_seed + idx) & 0xFFFFFFFF
        base_name = f"rides_n{n}_seed{seed}"
        json_path = os.path.join(output_dir, base_name + ".json")
        csv_path = os.path.join(output_dir, base_name + ".csv")

        if not force_overwrite and os.path.exists(json_path):
            records.append({
                "n": n, "seed": seed,
                "json": json_path, "csv": csv_path, "status": "skipped_exists"
            })
            print(f"exists (skipping): {json_path}")
            continue

        inst = generate_instance(n, budget_ratio=budget_ratio, seed=seed, **catalog_kwargs)
        save_instance_json(inst, json_path)
        save_catalog_csv(inst["rides"], csv_path)
        records.append({
            "n": n, "seed": seed,
            "json": json_path, "csv": csv_path, "status": "saved"
        })
    return records


if __name__ == "__main__":
    for rec in generate_batch([10, 20, 100, 1000]):
        print(rec)
