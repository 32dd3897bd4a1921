"""
Geospatial projection utilities for georeferencing plot-local coordinates.
"""
from typing import Tuple, List
import math
from pyproj import Transformer


def get_utm_zone(longitude: float) -> int:
    """
    Calculate the UTM zone number from longitude.

    Args:
        longitude: Longitude in degrees

    Returns:
        UTM zone number (1-60)
    """
    return min(int((longitude + 180) / 6) + 1, 60)


def get_utm_crs(longitude: float, latitude: float) -> str:
    """
    Get the appropriate UTM CRS (Coordinate Reference System) for a location.

    Args:
        longitude: Longitude in degrees
        latitude: Latitude in degrees

    Returns:
        EPSG code for the UTM zone
    """
    zone = get_utm_zone(longitude)
    # Northern hemisphere: EPSG:326XX, Southern hemisphere: EPSG:327XX
    hemisphere = "6" if latitude >= 0 else "7"
    return f"EPSG:32{hemisphere}{zone:02d}"


def rotate_local(
    x: float,
    y: float,
    orientation_deg: float,
) -> Tuple[float, float]:
    """
    Rotate plot-local meters into (east, north) offsets.

    The plot's local y axis points along the azimuth ``orientation_deg``
    (degrees clockwise from north); the local x axis is 90 degrees clockwise
    from it. North is the grid north of the origin's UTM zone.

    Args:
        x: Local x in meters
        y: Local y in meters
        orientation_deg: Azimuth of the local y axis

    Returns:
        (east, north) offset in meters
    """
    theta = math.radians(orientation_deg)
    east = x * math.cos(theta) + y * math.sin(theta)
    north = -x * math.sin(theta) + y * math.cos(theta)
    return east, north


def local_to_latlon(
    origin_lat: float,
    origin_lng: float,
    points: List[Tuple[float, float]],
    orientation_deg: float = 0.0,
) -> List[Tuple[float, float]]:
    """
    Convert plot-local meter coordinates to lat/lon.

    The origin is projected into its UTM zone, local offsets are rotated
    by the plot orientation and added in meters, and the result is projected
    back to WGS84.

    Args:
        origin_lat: Latitude of the plot's local origin
        origin_lng: Longitude of the plot's local origin
        points: List of (x, y) plot-local coordinates in meters
        orientation_deg: Azimuth of the plot's local y axis

    Returns:
        List of (latitude, longitude) tuples in degrees
    """
    if not points:
        return []

    utm_crs = get_utm_crs(origin_lng, origin_lat)

    # Create transformer from WGS84 (EPSG:4326) to UTM
    forward = Transformer.from_crs("EPSG:4326", utm_crs, always_xy=True)
    reverse = Transformer.from_crs(utm_crs, "EPSG:4326", always_xy=True)

    origin_x, origin_y = forward.transform(origin_lng, origin_lat)

    latlon = []
    for x, y in points:
        east, north = rotate_local(x, y, orientation_deg)
        lon, lat = reverse.transform(origin_x + east, origin_y + north)
        latlon.append((lat, lon))

    return latlon
