import logging

import numpy as np
import pytest

from ride_catalog import (
    RideDatabaseError,
    RideItem,
    RideValidationError,
    filter_ride_vector,
    format_2d_cache,
    format_ride_vector,
    load_ride_database,
    sum_ride_vector,
)
from conftest import CATALOG_SIZE


# --- RideItem ---
def test_ride_item_normalises_values():
    ride = RideItem("carousel", np.int64(7), 3)
    assert type(ride.cost) is int
    assert type(ride.time) is float
    assert ride == RideItem("carousel", 7, 3.0)


@pytest.mark.parametrize("description, cost", [
    ("", 5),
    ("zero cost", 0),
    ("negative cost", -3),
    ("fractional cost", 2.5),
    ("bool cost", True),
])
def test_ride_item_rejects_invalid(description, cost):
    with pytest.raises(RideValidationError):
        RideItem(description, cost, 1.0)


def test_ride_item_rejects_nan_time():
    with pytest.raises(RideValidationError):
        RideItem("broken", 1, float("nan"))


def test_ride_item_is_immutable(trivial_rides):
    with pytest.raises(AttributeError):
        trivial_rides[0].cost = 1


# --- sum_ride_vector ---
def test_sum_empty():
    assert sum_ride_vector([]) == (0, 0.0)


def test_sum_trivial(trivial_rides):
    assert sum_ride_vector(trivial_rides) == (14, 25.0)


# --- filter_ride_vector ---
def test_filter_respects_bounds_and_order():
    rides = [RideItem(f"ride {i}", 1, float(t)) for i, t in enumerate([0, 5, 10, 15, 20, -1, 10])]
    result = filter_ride_vector(rides, 5, 15, 10)
    assert [r.description for r in result] == ["ride 1", "ride 2", "ride 3", "ride 6"]
    assert all(5 <= r.time <= 15 for r in result)


def test_filter_caps_size():
    rides = [RideItem(f"ride {i}", 1, 10.0) for i in range(8)]
    assert filter_ride_vector(rides, 1, 100, 3) == rides[:3]
    assert filter_ride_vector(rides, 1, 100, 50) == rides
    assert filter_ride_vector(rides, 1, 100, 0) == []


def test_filter_does_not_mutate_source(trivial_rides):
    before = list(trivial_rides)
    filter_ride_vector(trivial_rides, 10, 30, 1)
    assert trivial_rides == before


# --- load_ride_database ---
def test_load_generated_catalog(all_rides):
    assert all_rides is not None
    assert len(all_rides) == CATALOG_SIZE


def test_filter_prefix_consistency(all_rides):
    three = filter_ride_vector(all_rides, 100, 500, 3)
    ten = filter_ride_vector(all_rides, 100, 500, 10)
    assert len(three) == 3
    assert len(ten) == 10
    assert three == ten[:3]
    matching = [r for r in all_rides if 100 <= r.time <= 500]
    assert ten == matching[:10]


def test_load_skips_bad_values(make_catalog):
    path = make_catalog([
        "good ride^10^20.5",
        "bad cost^abc^20",
        "zero cost^0^20",
        "fractional cost^2.5^20",
        "^3^20",
        "nan time^3^nan",
        "another good ride^4^0",
    ])
    rides = load_ride_database(path)
    assert rides == [
        RideItem("good ride", 10, 20.5),
        RideItem("another good ride", 4, 0.0),
    ]


@pytest.mark.parametrize("bad_row", ["two^fields", "four^fields^1^2", "trailing^1^2^", ""])
def test_load_aborts_on_field_count(make_catalog, caplog, bad_row):
    path = make_catalog(["good ride^10^20", bad_row, "never read^1^1"])
    with caplog.at_level(logging.ERROR, logger="ride_catalog"):
        assert load_ride_database(path) is None
    assert "Invalid field count at line 3" in caplog.text


def test_load_strict_raises(make_catalog):
    path = make_catalog(["two^fields"])
    with pytest.raises(RideDatabaseError, match="line 2; want 3 but got 2"):
        load_ride_database(path, strict=True)


def test_load_missing_file(tmp_path):
    missing = str(tmp_path / "nope.csv")
    assert load_ride_database(missing) is None
    with pytest.raises(RideDatabaseError, match="Cannot open file"):
        load_ride_database(missing, strict=True)


def test_load_blank_row_fails_load(make_catalog):
    path = make_catalog(["good^1^2", "", "also^2^3"])
    assert load_ride_database(path) is None
    with pytest.raises(RideDatabaseError, match="want 3 but got 1"):
        load_ride_database(path, strict=True)


def test_load_invalid_utf8_fails_load(tmp_path, caplog):
    path = tmp_path / "latin.csv"
    path.write_bytes(b"description^cost^time\nok^1^2\n\xff\xfe bad^2^3\n")
    with caplog.at_level(logging.ERROR, logger="ride_catalog"):
        assert load_ride_database(str(path)) is None
    assert "Cannot decode" in caplog.text
    with pytest.raises(RideDatabaseError, match="Cannot decode"):
        load_ride_database(str(path), strict=True)


def test_load_header_only(make_catalog):
    assert load_ride_database(make_catalog([])) == []


# --- reports ---
def test_format_empty_ride_vector():
    assert format_ride_vector([]).splitlines() == ["*** ride Vector ***", "[empty ride list]"]


def test_format_ride_vector(trivial_rides):
    text = format_ride_vector(trivial_rides)
    assert "Ye olde test Ferris Wheel ==> Cost of 10 dollars; time points = 20" in text
    assert "> Grand total cost: 14 dollars" in text
    assert "> Grand total time: 25" in text


def test_format_2d_cache():
    text = format_2d_cache(np.array([[0.0, 0.0, 0.0], [0.0, 5.0, 12.5]]))
    assert text.splitlines() == ["*** 2D Cache ***", "    0    0    0", "    0    5 12.5"]


def test_format_2d_cache_limits():
    assert format_2d_cache([]).endswith("[empty]")
    assert format_2d_cache(np.zeros((2, 251))).endswith("[too large]")
    assert format_2d_cache(np.zeros((251, 2))).endswith("[too large]")
