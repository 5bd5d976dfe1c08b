"""Unit tests for geographic anomaly detection"""

from dataclasses import replace
from datetime import timedelta

import pytest
from hypothesis import given, strategies as st

from factories import BASE_TIME, HOME_LAT, HOME_LON, meters_north
from upi_sentinel.config import Settings
from upi_sentinel.domain.exceptions import InvalidCoordinateError, InvalidSafeZoneError
from upi_sentinel.domain.geo import (
    check_fraud_alerts,
    create_safe_zone,
    distance,
    haversine_distance,
    is_unusual_location,
    location_stats,
    match_safe_zone,
    record_location,
)
from upi_sentinel.domain.models import (
    AlertSeverity,
    Coordinate,
    FraudAlert,
    LocationRecord,
    SafeZone,
    TravelMode,
    ZoneKind,
)

latitudes = st.floats(min_value=-90, max_value=90, allow_nan=False)
longitudes = st.floats(min_value=-180, max_value=180, allow_nan=False)


def test_haversine_known_distance():
    """Test Bengaluru to Chennai is roughly 290 km"""
    meters = haversine_distance(12.9716, 77.5946, 13.0827, 80.2707)
    assert meters == pytest.approx(290_000, rel=0.02)


def test_distance_along_meridian(home):
    assert distance(home, meters_north(HOME_LAT, HOME_LON, 1500)) == pytest.approx(1500, rel=1e-9)


def test_distance_antipodal_points_do_not_fail():
    a = Coordinate(latitude=0, longitude=0, captured_at=BASE_TIME)
    b = Coordinate(latitude=0, longitude=180, captured_at=BASE_TIME)
    assert distance(a, b) == pytest.approx(20_015_086, rel=1e-4)


@given(lat=latitudes, lon=longitudes)
def test_distance_to_self_is_zero(lat: float, lon: float):
    point = Coordinate(latitude=lat, longitude=lon, captured_at=BASE_TIME)
    assert distance(point, point) == 0


@given(lat1=latitudes, lon1=longitudes, lat2=latitudes, lon2=longitudes)
def test_distance_is_symmetric(lat1: float, lon1: float, lat2: float, lon2: float):
    a = Coordinate(latitude=lat1, longitude=lon1, captured_at=BASE_TIME)
    b = Coordinate(latitude=lat2, longitude=lon2, captured_at=BASE_TIME)
    assert distance(a, b) == distance(b, a)


def test_coordinate_rejects_out_of_range():
    with pytest.raises(InvalidCoordinateError):
        Coordinate(latitude=91, longitude=0, captured_at=BASE_TIME)
    with pytest.raises(InvalidCoordinateError):
        Coordinate(latitude=0, longitude=-180.5, captured_at=BASE_TIME)


def test_match_safe_zone_inside(home_zone):
    assert match_safe_zone(meters_north(HOME_LAT, HOME_LON, 400), [home_zone]) == home_zone


def test_match_safe_zone_outside(home_zone):
    assert match_safe_zone(meters_north(HOME_LAT, HOME_LON, 600), [home_zone]) is None


def test_match_safe_zone_boundary_is_inside(home):
    """Test a point exactly on the radius counts as inside"""
    edge = meters_north(HOME_LAT, HOME_LON, 250)
    zone = SafeZone(id="z", name="Edge", kind=ZoneKind.CUSTOM, center=home, radius_meters=distance(edge, home))
    assert match_safe_zone(edge, [zone]) == zone


def test_match_safe_zone_skips_disabled(home_zone):
    disabled = replace(home_zone, enabled=False)
    assert match_safe_zone(meters_north(HOME_LAT, HOME_LON, 100), [disabled]) is None


def test_match_safe_zone_first_match_wins(home):
    """Test caller order decides, not proximity"""
    office_center = meters_north(HOME_LAT, HOME_LON, 900)
    wide = SafeZone(id="z1", name="Neighbourhood", kind=ZoneKind.CUSTOM, center=home, radius_meters=2000)
    office = SafeZone(id="z2", name="Office", kind=ZoneKind.WORK, center=office_center, radius_meters=300)

    assert match_safe_zone(office_center, [wide, office]).name == "Neighbourhood"
    assert match_safe_zone(office_center, [office, wide]).name == "Office"


def test_is_unusual_location_empty_history(home):
    result = is_unusual_location(meters_north(HOME_LAT, HOME_LON, 500_000), [], TravelMode())
    assert result.unusual is False
    assert result.distance_km is None


def test_is_unusual_location_far_from_centroid(location_history, config):
    """Test 15 km from the usual area is unusual outside travel mode"""
    current = meters_north(HOME_LAT, HOME_LON, 15_000)
    result = is_unusual_location(current, location_history, TravelMode(enabled=False), config)

    assert result.unusual is True
    assert result.distance_km == pytest.approx(15.0, rel=1e-6)
    assert result.reason == "15.0km from your usual area"


def test_is_unusual_location_within_default_threshold(location_history, config):
    current = meters_north(HOME_LAT, HOME_LON, 8_000)
    result = is_unusual_location(current, location_history, TravelMode(), config)

    assert result.unusual is False
    assert result.distance_km == pytest.approx(8.0, rel=1e-6)


def test_is_unusual_location_exactly_at_threshold_is_usual(location_history, config):
    """Test the distance must exceed the threshold, not just reach it"""
    current = meters_north(HOME_LAT, HOME_LON, 10_000)
    measured = is_unusual_location(current, location_history, TravelMode(), config).distance_km

    at_threshold = Settings(_env_file=None, default_unusual_distance_km=measured)
    result = is_unusual_location(current, location_history, TravelMode(), at_threshold)

    assert result.unusual is False
    assert result.reason is None
    assert result.distance_km == measured


def test_is_unusual_location_travel_mode_uses_its_threshold(location_history, config):
    current = meters_north(HOME_LAT, HOME_LON, 15_000)

    relaxed = is_unusual_location(current, location_history, TravelMode(enabled=True, alert_threshold_km=20), config)
    assert relaxed.unusual is False

    tight = is_unusual_location(current, location_history, TravelMode(enabled=True, alert_threshold_km=5), config)
    assert tight.unusual is True


def test_is_unusual_location_travel_mode_falls_back_to_config(location_history):
    config = Settings(_env_file=None, travel_alert_threshold_km=12)
    current = meters_north(HOME_LAT, HOME_LON, 15_000)
    assert is_unusual_location(current, location_history, TravelMode(enabled=True), config).unusual is True


def test_is_unusual_location_only_uses_recent_window(location_history, config, home):
    """Test records beyond the 50 most recent do not move the centroid"""
    far = meters_north(HOME_LAT, HOME_LON, 100_000)
    old_trip = [
        LocationRecord(
            scan_id=f"old_{i}",
            location=replace(far, captured_at=BASE_TIME - timedelta(days=30, hours=i)),
            in_safe_zone=False,
        )
        for i in range(10)
    ]
    # Oldest records first: ordering comes from timestamps, not list position
    history = old_trip + location_history

    result = is_unusual_location(home, history, TravelMode(), config)
    assert result.unusual is False
    assert result.distance_km == pytest.approx(0.0, abs=1e-6)


@given(lat=latitudes, lon=longitudes)
def test_is_unusual_location_never_unusual_without_history(lat: float, lon: float):
    current = Coordinate(latitude=lat, longitude=lon, captured_at=BASE_TIME)
    assert is_unusual_location(current, [], TravelMode(enabled=False)).unusual is False


def _alert(alert_id: str, center: Coordinate, radius: float) -> FraudAlert:
    return FraudAlert(
        id=alert_id,
        location=center,
        radius_meters=radius,
        report_count=4,
        last_reported=BASE_TIME,
        fraud_type="fake_qr_sticker",
        severity=AlertSeverity.HIGH,
    )


def test_check_fraud_alerts_uses_each_alert_radius(home):
    wide = _alert("wide", home, 1000)
    narrow = _alert("narrow", home, 500)
    here = meters_north(HOME_LAT, HOME_LON, 800)

    assert check_fraud_alerts(here, [wide, narrow]) == [wide]


def test_check_fraud_alerts_radius_is_inclusive(home):
    """Test a scan exactly on an alert radius still matches"""
    here = meters_north(HOME_LAT, HOME_LON, 750)
    edge = _alert("edge", home, distance(here, home))

    assert check_fraud_alerts(here, [edge]) == [edge]


def test_check_fraud_alerts_none_nearby(home):
    assert check_fraud_alerts(meters_north(HOME_LAT, HOME_LON, 5000), [_alert("a", home, 1000)]) == []


def test_record_location_in_zone(home_zone):
    here = meters_north(HOME_LAT, HOME_LON, 100)
    zones = [home_zone]
    record = record_location("scan_1", here, "Corner Store", zones)

    assert record == LocationRecord(
        scan_id="scan_1",
        location=here,
        in_safe_zone=True,
        merchant_name="Corner Store",
        matched_zone_name="Home",
    )
    assert zones == [home_zone]


def test_record_location_outside_zone(home_zone):
    record = record_location("scan_2", meters_north(HOME_LAT, HOME_LON, 5000), None, [home_zone])

    assert record.in_safe_zone is False
    assert record.matched_zone_name is None


def test_create_safe_zone_defaults(home):
    zone = create_safe_zone("Home", ZoneKind.HOME, home)

    assert zone.id.startswith("zone-")
    assert zone.radius_meters == 500
    assert zone.enabled is True
    assert zone.alert_on_exit is True


def test_create_safe_zone_custom_does_not_alert_on_exit(home):
    zone = create_safe_zone("Gym", ZoneKind.CUSTOM, home, radius_meters=150, zone_id="zone-gym")

    assert zone.id == "zone-gym"
    assert zone.radius_meters == 150
    assert zone.alert_on_exit is False


def test_safe_zone_rejects_non_positive_radius(home):
    with pytest.raises(InvalidSafeZoneError):
        create_safe_zone("Nowhere", ZoneKind.CUSTOM, home, radius_meters=0)


def test_location_stats(location_history):
    away = LocationRecord(scan_id="away", location=meters_north(HOME_LAT, HOME_LON, 3000), in_safe_zone=False)
    stats = location_stats(location_history + [away])

    assert stats.total_scans == 51
    assert stats.in_safe_zone == 50
    assert stats.outside_safe_zone == 1
    assert stats.unique_locations == 2


def test_location_stats_empty():
    stats = location_stats([])
    assert (stats.total_scans, stats.in_safe_zone, stats.unique_locations) == (0, 0, 0)
