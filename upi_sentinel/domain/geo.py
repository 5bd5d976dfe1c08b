"""
Geographic anomaly detection for scan locations.

Distances are great-circle (haversine) on a spherical Earth and returned in
meters unless a name says otherwise. All inputs and outputs use degrees;
radians only exist inside the distance calculation.
"""

import math
import uuid
from typing import Iterable, List, Optional, Sequence

from upi_sentinel.config import Settings, settings
from upi_sentinel.domain.models import (
    Coordinate,
    FraudAlert,
    LocationRecord,
    LocationStats,
    SafeZone,
    TravelMode,
    UnusualLocationResult,
    ZoneKind,
)
from upi_sentinel.utils.date_utils import newest_first

EARTH_RADIUS_M = 6_371_000.0

# 0.001 degree of latitude is roughly 111 m
GRID_CELLS_PER_DEGREE = 1000


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two points given in degrees"""
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = lat2_rad - lat1_rad
    dlon = math.radians(lon2) - math.radians(lon1)

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    # Rounding can push `a` a hair above 1 for antipodal points
    c = 2 * math.asin(math.sqrt(min(a, 1.0)))

    return EARTH_RADIUS_M * c


def distance(a: Coordinate, b: Coordinate) -> float:
    """Meters between two coordinates; symmetric and zero for identical points"""
    return haversine_distance(a.latitude, a.longitude, b.latitude, b.longitude)


def match_safe_zone(location: Coordinate, zones: Iterable[SafeZone]) -> Optional[SafeZone]:
    """
    Return the first enabled zone containing the location (boundary inclusive).

    Zones are checked in the order given; a later zone with a closer center
    does not win over an earlier match.
    """
    for zone in zones:
        if not zone.enabled:
            continue
        if distance(location, zone.center) <= zone.radius_meters:
            return zone
    return None


def is_unusual_location(
    current: Coordinate,
    history: Sequence[LocationRecord],
    travel_mode: TravelMode | None = None,
    config: Settings | None = None,
) -> UnusualLocationResult:
    """
    Flag a location that is far from where the user usually scans.

    "Usual area" is the plain arithmetic mean of latitude and longitude over
    the most recent `location_history_window` records (50 by default). The
    current point is unusual when it lies strictly further than:
    - the travel-mode threshold, when travel mode is on
    - `default_unusual_distance_km` (10 km), otherwise

    With no history nothing is ever unusual.
    """
    if not history:
        return UnusualLocationResult(unusual=False)

    cfg = config or settings
    recent = newest_first(history, lambda r: r.location.captured_at, cfg.location_history_window)

    avg_lat = sum(r.location.latitude for r in recent) / len(recent)
    avg_lon = sum(r.location.longitude for r in recent) / len(recent)
    distance_km = haversine_distance(current.latitude, current.longitude, avg_lat, avg_lon) / 1000

    if travel_mode is not None and travel_mode.enabled:
        threshold_km = (
            travel_mode.alert_threshold_km
            if travel_mode.alert_threshold_km is not None
            else cfg.travel_alert_threshold_km
        )
    else:
        threshold_km = cfg.default_unusual_distance_km

    if distance_km > threshold_km:
        return UnusualLocationResult(
            unusual=True,
            reason=f"{distance_km:.1f}km from your usual area",
            distance_km=distance_km,
        )
    return UnusualLocationResult(unusual=False, distance_km=distance_km)


def check_fraud_alerts(location: Coordinate, alerts: Iterable[FraudAlert]) -> List[FraudAlert]:
    """All alerts whose own radius covers the location, in input order"""
    return [alert for alert in alerts if distance(location, alert.location) <= alert.radius_meters]


def record_location(
    scan_id: str,
    location: Coordinate,
    merchant_name: Optional[str],
    zones: Iterable[SafeZone],
) -> LocationRecord:
    """Build the history entry for a scan; zones and history are left untouched"""
    zone = match_safe_zone(location, zones)
    return LocationRecord(
        scan_id=scan_id,
        location=location,
        in_safe_zone=zone is not None,
        merchant_name=merchant_name,
        matched_zone_name=zone.name if zone else None,
    )


def create_safe_zone(
    name: str,
    kind: ZoneKind,
    center: Coordinate,
    radius_meters: float | None = None,
    zone_id: str | None = None,
    config: Settings | None = None,
) -> SafeZone:
    """New enabled zone; home and work zones alert on exit by default"""
    cfg = config or settings
    return SafeZone(
        id=zone_id or f"zone-{uuid.uuid4().hex[:12]}",
        name=name,
        kind=kind,
        center=center,
        radius_meters=radius_meters if radius_meters is not None else cfg.default_safe_zone_radius_m,
        enabled=True,
    )


def location_stats(history: Sequence[LocationRecord]) -> LocationStats:
    """Safe-zone coverage and an approximate count of distinct places (~100 m grid)"""
    in_zone = sum(1 for record in history if record.in_safe_zone)
    cells = {
        (
            math.floor(record.location.latitude * GRID_CELLS_PER_DEGREE),
            math.floor(record.location.longitude * GRID_CELLS_PER_DEGREE),
        )
        for record in history
    }
    return LocationStats(
        total_scans=len(history),
        in_safe_zone=in_zone,
        outside_safe_zone=len(history) - in_zone,
        unique_locations=len(cells),
    )
