"""Coordinate extraction and camera math for KML documents. No I/O."""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

logger = logging.getLogger(__name__)

# Degrees to metres at the equator.
METERS_PER_DEGREE = 111320.0
RANGE_MARGIN = 1.8
MIN_RANGE = 5000.0
MAX_RANGE = 20000000.0
DEFAULT_RANGE = 500000.0

POINT_PATTERN = re.compile(
    r"<Point\b[^>]*>(?:(?!</Point>).)*?<coordinates>([^<]+)</coordinates>",
    re.DOTALL,
)
COORDINATES_PATTERN = re.compile(r"<coordinates>([^<]+)</coordinates>", re.DOTALL)


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float


def parse_tuple(text: str) -> Optional[Coordinate]:
    """Parse one ``lon,lat[,alt]`` tuple; None if malformed or out of range."""
    parts = text.strip().split(",")
    if len(parts) < 2:
        return None
    try:
        longitude = float(parts[0])
        latitude = float(parts[1])
    except ValueError:
        return None
    if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
        return None
    return Coordinate(latitude, longitude)


def _parse_tuples(tuples: Iterable[str], log: logging.Logger) -> list[Coordinate]:
    coords = []
    for item in tuples:
        coord = parse_tuple(item)
        if coord is None:
            log.warning("Skipping malformed coordinate tuple: %r", item[:80])
            continue
        coords.append(coord)
    return coords


def extract_coordinates(document: str, log: Optional[logging.Logger] = None) -> list[Coordinate]:
    """Collect coordinates from Point elements, or from any coordinate list if there are none."""
    log = log or logger

    point_tuples = []
    for match in POINT_PATTERN.finditer(document):
        tuples = match.group(1).split()
        if tuples:
            point_tuples.append(tuples[0])
    coordinates = _parse_tuples(point_tuples, log)

    if not coordinates:
        log.debug("No Point coordinates found, scanning polygon/line coordinates")
        line_tuples = []
        for match in COORDINATES_PATTERN.finditer(document):
            line_tuples.extend(match.group(1).split())
        coordinates = _parse_tuples(line_tuples, log)

    log.info("Extracted %d coordinates", len(coordinates))
    return coordinates


def _bounds(coordinates: Sequence[Coordinate]) -> tuple[float, float, float, float]:
    lats = [c.latitude for c in coordinates]
    lngs = [c.longitude for c in coordinates]
    return min(lats), max(lats), min(lngs), max(lngs)


def calculate_center(coordinates: Sequence[Coordinate]) -> Coordinate:
    """Midpoint of the bounding box (not the centroid of the points)."""
    if not coordinates:
        logger.warning("Cannot calculate center without coordinates, using (0, 0)")
        return Coordinate(0.0, 0.0)
    min_lat, max_lat, min_lng, max_lng = _bounds(coordinates)
    return Coordinate((min_lat + max_lat) / 2, (min_lng + max_lng) / 2)


def calculate_range(coordinates: Sequence[Coordinate]) -> float:
    """Camera range in metres that keeps the whole bounding box in view."""
    if len(coordinates) < 2:
        return DEFAULT_RANGE
    min_lat, max_lat, min_lng, max_lng = _bounds(coordinates)
    spread = max(max_lat - min_lat, max_lng - min_lng)
    distance = spread * METERS_PER_DEGREE * RANGE_MARGIN
    return min(max(distance, MIN_RANGE), MAX_RANGE)


def build_look_at(
    latitude: float,
    longitude: float,
    range_m: float,
    tilt: float = 60,
    heading: float = 0,
    altitude_mode: str = "relativeToGround",
) -> str:
    return (
        f"<LookAt><longitude>{longitude}</longitude><latitude>{latitude}</latitude>"
        f"<range>{range_m}</range><tilt>{tilt}</tilt><heading>{heading}</heading>"
        f"<altitudeMode>{altitude_mode}</altitudeMode></LookAt>"
    )
