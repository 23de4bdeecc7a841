from __future__ import annotations

from src.domain.algorithms.geo_utils import haversine_distance_m, is_within_radius_m
from src.domain.models.geo import GeoPoint

NAHA = GeoPoint(lat=26.2233, lon=127.691028)


def test_haversine_zero_for_identical_points() -> None:
    assert haversine_distance_m(NAHA, NAHA) == 0.0


def test_haversine_is_symmetric_and_reasonable_scale() -> None:
    # Rough sanity check: 1 degree of latitude is about 111km.
    a = GeoPoint(lat=0.0, lon=0.0)
    b = GeoPoint(lat=1.0, lon=0.0)

    d1 = haversine_distance_m(a, b)
    d2 = haversine_distance_m(b, a)

    assert abs(d1 - d2) < 1e-6
    assert 100_000.0 < d1 < 120_000.0


def test_within_radius() -> None:
    nearby = GeoPoint(lat=26.2287, lon=127.684)  # map center, about 1km away
    nago = GeoPoint(lat=26.5917, lon=127.9775)  # about 50km north

    assert is_within_radius_m(NAHA, nearby, 1_500.0)
    assert not is_within_radius_m(NAHA, nago, 30_000.0)


def test_non_positive_radius_means_unbounded() -> None:
    far = GeoPoint(lat=35.68, lon=139.76)

    assert is_within_radius_m(NAHA, far, 0.0)
