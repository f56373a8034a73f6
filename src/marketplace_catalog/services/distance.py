"""Great-circle distance between coordinates."""

import math

from marketplace_catalog.models.catalog_models import GeoPoint

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Calculate the haversine distance between two points in kilometers.

    Args:
        lat1: Latitude of the first point in degrees
        lng1: Longitude of the first point in degrees
        lat2: Latitude of the second point in degrees
        lng2: Longitude of the second point in degrees

    Returns:
        Non-negative distance in kilometers, 0.0 for identical points
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lng2 - lng1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    # Rounding can push a just past 1 for antipodal points
    a = min(1.0, a)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def distance_between(origin: GeoPoint | None, destination: GeoPoint | None) -> float | None:
    """Distance between two optional points, None when either is unknown."""
    if origin is None or destination is None:
        return None
    return haversine_km(
        origin.latitude, origin.longitude, destination.latitude, destination.longitude
    )
