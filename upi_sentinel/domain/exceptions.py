"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class InvalidCoordinateError(DomainException):
    """Latitude or longitude is outside the valid degree range"""

    pass


class InvalidSafeZoneError(DomainException):
    """Safe zone radius is zero or negative"""

    pass


class InvalidScanRecordError(DomainException):
    """Scan record carries a non-positive amount"""

    pass
