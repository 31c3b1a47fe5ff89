"""
Great-circle distance and candidate-pair enumeration for stop proximity.

The proximity engine asks a pair strategy for the index pairs worth measuring,
then applies the exact haversine test itself. Strategies only prune; they never
decide whether a pair is within range.
"""

import math
from collections import defaultdict
from typing import Iterator, List, Sequence, Tuple

# Mean Earth radius in meters (spherical model)
EARTH_RADIUS_METERS = 6_371_000

# Meters per degree of latitude on the spherical model
METERS_PER_DEGREE = EARTH_RADIUS_METERS * math.pi / 180

Coordinate = Tuple[float, float]


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate the distance between two points on Earth using the Haversine formula.

    Args:
        lat1: Latitude of first point in degrees
        lon1: Longitude of first point in degrees
        lat2: Latitude of second point in degrees
        lon2: Longitude of second point in degrees

    Returns:
        Distance in meters. NaN inputs propagate to a NaN result.
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    delta_phi = math.radians(lat2 - lat1)
    delta_lambda = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(delta_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_METERS * c


class PairwiseScan:
    """Every unordered pair (i, j), i < j"""

    name = "pairwise"

    def candidate_pairs(
        self, points: Sequence[Coordinate], max_distance_meters: float
    ) -> Iterator[Tuple[int, int]]:
        count = len(points)
        for i in range(count):
            for j in range(i + 1, count):
                yield i, j


class GridScan:
    """Bucket points on a lat/lon grid and only pair points in neighbouring cells.

    The latitude cell spans ``max_distance`` of arc. The longitude cell is
    widened by ``pi / 2 / cos(max_abs_lat)``, which bounds the longitude
    difference of any two points within range at the dataset's highest
    latitude. Antimeridian wrap-around is not handled; near the poles the scan
    degrades to the pairwise one.
    """

    name = "grid"

    # Below this cosine (about 84 degrees of latitude) the longitude cells
    # become too wide to be useful
    MIN_COS_LATITUDE = 0.1

    def __init__(self):
        self._fallback = PairwiseScan()

    def candidate_pairs(
        self, points: Sequence[Coordinate], max_distance_meters: float
    ) -> Iterator[Tuple[int, int]]:
        if len(points) < 2:
            return

        max_abs_lat = max(abs(lat) for lat, _ in points)
        cos_lat = math.cos(math.radians(max_abs_lat))
        if max_distance_meters <= 0 or cos_lat < self.MIN_COS_LATITUDE:
            yield from self._fallback.candidate_pairs(points, max_distance_meters)
            return

        lat_cell = max_distance_meters / METERS_PER_DEGREE
        lon_cell = lat_cell * (math.pi / 2) / cos_lat

        cells: dict[Tuple[int, int], List[int]] = defaultdict(list)
        for index, (lat, lon) in enumerate(points):
            cells[(math.floor(lat / lat_cell), math.floor(lon / lon_cell))].append(index)

        for (row, col), members in cells.items():
            for d_row in (-1, 0, 1):
                for d_col in (-1, 0, 1):
                    neighbours = cells.get((row + d_row, col + d_col))
                    if not neighbours:
                        continue
                    for i in members:
                        for j in neighbours:
                            # Each unordered pair is emitted exactly once
                            if i < j:
                                yield i, j


def get_pair_strategy(name: str):
    """Resolve a pair strategy by its configured name"""
    strategies = {
        PairwiseScan.name: PairwiseScan,
        GridScan.name: GridScan,
    }
    try:
        return strategies[name]()
    except KeyError:
        raise ValueError(f"Unknown pair strategy '{name}'") from None
