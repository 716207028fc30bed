"""
Geometry and Date Helpers

Conversions for ArcGIS feature payloads: polygon centroids and epoch
millisecond dates.
"""
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional, Tuple

from src.tenement_sync.utils.logger import get_logger

logger = get_logger(__name__)


def ring_centroid(geometry: Optional[Dict[str, Any]]) -> Optional[Tuple[float, float]]:
    """
    Approximate centroid of an ArcGIS polygon as the vertex average of its outer ring.

    Args:
        geometry: ArcGIS geometry with a "rings" array

    Returns:
        (longitude, latitude) or None when the geometry has no usable ring
    """
    if not isinstance(geometry, dict):
        return None

    rings = geometry.get("rings")
    if not isinstance(rings, list) or not rings:
        return None

    ring = rings[0]
    if not isinstance(ring, list) or len(ring) < 3:
        return None

    total_x = 0.0
    total_y = 0.0
    count = 0
    for point in ring:
        if isinstance(point, (list, tuple)) and len(point) >= 2:
            try:
                total_x += float(point[0])
                total_y += float(point[1])
            except (TypeError, ValueError):
                continue
            count += 1

    if count == 0:
        return None

    return total_x / count, total_y / count


def epoch_ms_to_date(timestamp_ms: Optional[Any]) -> Optional[date]:
    """
    Convert an ArcGIS date (milliseconds since epoch, UTC) to a date.

    Args:
        timestamp_ms: Timestamp in milliseconds

    Returns:
        Date or None
    """
    if timestamp_ms is None or timestamp_ms == "":
        return None

    try:
        return datetime.fromtimestamp(float(timestamp_ms) / 1000, tz=timezone.utc).date()
    except (TypeError, ValueError, OverflowError, OSError):
        logger.debug("arcgis_date_unparseable", value=timestamp_ms)
        return None
