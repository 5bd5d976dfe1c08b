"""Pytest fixtures for testing"""

from datetime import timedelta
from typing import Callable, List, Optional

import pytest

from upi_sentinel.config import Settings
from upi_sentinel.domain.models import (
    Coordinate,
    LocationRecord,
    SafeZone,
    ScanRecord,
    ScanStatus,
    ZoneKind,
)

from factories import BASE_TIME, HOME_LAT, HOME_LON


@pytest.fixture
def config() -> Settings:
    """Default thresholds, isolated from any UPI_SENTINEL_* environment"""
    return Settings(_env_file=None)


@pytest.fixture
def home() -> Coordinate:
    return Coordinate(latitude=HOME_LAT, longitude=HOME_LON, captured_at=BASE_TIME, accuracy=12.0)


@pytest.fixture
def home_zone(home: Coordinate) -> SafeZone:
    return SafeZone(id="zone-home", name="Home", kind=ZoneKind.HOME, center=home, radius_meters=500)


@pytest.fixture
def make_scan() -> Callable[..., ScanRecord]:
    """Factory for scan records `minutes_ago` before BASE_TIME"""

    def _make(
        identifier: str = "shop@oksbi",
        status: ScanStatus = ScanStatus.SAFE,
        minutes_ago: float = 0,
        amount: Optional[float] = None,
        merchant_name: Optional[str] = None,
    ) -> ScanRecord:
        return ScanRecord(
            identifier=identifier,
            status=status,
            timestamp=BASE_TIME - timedelta(minutes=minutes_ago),
            merchant_name=merchant_name,
            amount=amount,
        )

    return _make


@pytest.fixture
def location_history(home: Coordinate) -> List[LocationRecord]:
    """50 scans at home, one per hour going back"""
    return [
        LocationRecord(
            scan_id=f"scan_{i}",
            location=Coordinate(
                latitude=home.latitude,
                longitude=home.longitude,
                captured_at=BASE_TIME - timedelta(hours=i),
            ),
            in_safe_zone=True,
            merchant_name="Corner Store",
            matched_zone_name="Home",
        )
        for i in range(50)
    ]
