import pytest

from washhub.utils.geo import (
    bounding_box,
    distance_km,
    distance_text,
    estimated_travel_minutes,
    is_within_service_range,
)

from conftest import ABUJA, USER_LAT, USER_LNG, YABA


def test_distance_to_same_point_is_zero():
    assert distance_km(USER_LAT, USER_LNG, USER_LAT, USER_LNG) == 0


def test_distance_is_symmetric():
    there = distance_km(USER_LAT, USER_LNG, *ABUJA)
    back = distance_km(*ABUJA, USER_LAT, USER_LNG)
    assert there == pytest.approx(back)


def test_distance_known_value():
    # One degree of latitude along a meridian
    assert distance_km(0, 0, 1, 0) == pytest.approx(111.19, abs=0.01)


def test_travel_minutes_rounds_up():
    assert estimated_travel_minutes(0) == 0
    assert estimated_travel_minutes(0.1) == 1
    assert estimated_travel_minutes(1.01) == 3
    assert estimated_travel_minutes(15) == 30
    assert estimated_travel_minutes(45) == 90


def test_travel_minutes_is_non_decreasing():
    distances = [0, 0.1, 0.5, 1, 2.5, 10, 10.01, 100]
    minutes = [estimated_travel_minutes(d) for d in distances]
    assert minutes == sorted(minutes)


def test_within_service_range():
    assert is_within_service_range(USER_LAT, USER_LNG, *YABA, 30)
    assert not is_within_service_range(USER_LAT, USER_LNG, *ABUJA, 180)


def test_distance_text():
    assert distance_text(0.85) == "850 m away"
    assert distance_text(3.24) == "3.2 km away"


def test_bounding_box_contains_radius():
    min_lat, max_lat, min_lon, max_lon = bounding_box(USER_LAT, USER_LNG, 10)
    assert min_lat < USER_LAT < max_lat
    assert min_lon < USER_LNG < max_lon
    assert min_lat <= YABA[0] <= max_lat and min_lon <= YABA[1] <= max_lon


def test_bounding_box_across_antimeridian_spans_all_longitudes():
    _, _, min_lon, max_lon = bounding_box(0, 179.95, 50)
    assert (min_lon, max_lon) == (-180.0, 180.0)
