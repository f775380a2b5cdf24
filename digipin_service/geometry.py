# digipin_service/geometry.py
from shapely.geometry import Polygon, box, mapping

from .digipin import Cell, decode_cell, format_code, normalize_code


def _to_polygon(cell: Cell) -> Polygon:
    # GeoJSON axis order: x is longitude, y is latitude
    return box(cell.min_lon, cell.min_lat, cell.max_lon, cell.max_lat)


def cell_polygon(digipin: str) -> Polygon:
    """The final DIGIPIN cell as a lon/lat rectangle."""
    return _to_polygon(decode_cell(digipin))


def cell_feature(digipin: str) -> dict:
    """
    Builds a GeoJSON Feature for the cell a DIGIPIN names.

    The feature's properties carry the normalized code and the cell centroid,
    formatted the same way as a regular decode.
    """
    pin = normalize_code(digipin)
    cell = decode_cell(pin)
    center_lat, center_lon = cell.centroid

    return {
        'type': 'Feature',
        'bbox': [cell.min_lon, cell.min_lat, cell.max_lon, cell.max_lat],
        'geometry': mapping(_to_polygon(cell)),
        'properties': {
            'digipin': format_code(pin),
            'latitude': f"{center_lat:.6f}",
            'longitude': f"{center_lon:.6f}",
        },
    }
