"""
Geospatial utilities: great-circle distance, privacy blur, point parsing.
"""

import math
import random
import re
from collections.abc import Mapping
from typing import Any, Optional

import structlog
from pydantic import ValidationError

from models.base import Coordinate

logger = structlog.get_logger(__name__)

EARTH_RADIUS_KM = 6371.0
METERS_PER_DEGREE = 111000.0
DEFAULT_BLUR_METERS = 200.0

_POINT_RE = re.compile(
    r"^\s*POINT\s*\(\s*([-+]?\d+(?:\.\d+)?)\s+([-+]?\d+(?:\.\d+)?)\s*\)\s*$",
    re.IGNORECASE,
)


def distance(a: Coordinate, b: Coordinate) -> float:
    """Haversine distance between two points in kilometers"""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = math.radians(b.latitude - a.latitude)
    d_lon = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    )
    # Rounding can push h marginally above 1 for antipodal points
    h = min(1.0, h)
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def blur(
    c: Coordinate,
    radius_meters: float = DEFAULT_BLUR_METERS,
    rng: Optional[random.Random] = None,
) -> Coordinate:
    """
    Displace a coordinate by a random direction and distance.

    The offset distance is uniform in [0, radius_meters], converted to
    degrees at 111 km per degree. Output differs on every call, so blur once
    when the record is written and store the result.

    Args:
        c: Precise coordinate
        radius_meters: Maximum displacement
        rng: Random source (defaults to the module-level generator)

    Raises:
        ValueError: If radius_meters is negative
    """
    if radius_meters < 0:
        raise ValueError(f"radius_meters must be >= 0, got {radius_meters}")

    rng = rng or random
    offset_degrees = radius_meters / METERS_PER_DEGREE
    angle = rng.random() * 2 * math.pi
    dist = rng.random() * offset_degrees

    return Coordinate(
        latitude=c.latitude + math.cos(angle) * dist,
        longitude=c.longitude + math.sin(angle) * dist,
    )


def parse_point(value: Any) -> Optional[Coordinate]:
    """
    Read a coordinate from the shapes stored records use.

    Accepts a Coordinate, a mapping with ``lat``/``lng`` or
    ``latitude``/``longitude`` keys, or a WKT ``POINT(lng lat)`` string.
    Returns None when the value cannot be read.
    """
    if value is None:
        return None
    if isinstance(value, Coordinate):
        return value

    try:
        if isinstance(value, str):
            m = _POINT_RE.match(value)
            if not m:
                return None
            return Coordinate(longitude=float(m.group(1)), latitude=float(m.group(2)))

        if isinstance(value, Mapping):
            lat = value.get("latitude", value.get("lat"))
            lon = value.get("longitude", value.get("lng", value.get("lon")))
            if lat is None or lon is None:
                return None
            return Coordinate(latitude=float(lat), longitude=float(lon))
    except (TypeError, ValueError, ValidationError):
        logger.warning("Unreadable point value", value=str(value))
        return None

    return None
