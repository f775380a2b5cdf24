# digipin_service/digipin.py
import math
from typing import NamedTuple

from .exceptions import InvalidLengthError, InvalidSymbolError, OutOfRangeError

DIGIPIN_GRID = (
    ('F', 'C', '9', '8'),
    ('J', '3', '2', '7'),
    ('K', '4', '5', '6'),
    ('L', 'M', 'P', 'T'),
)

BOUNDS = {
    'minLat': 2.5,
    'maxLat': 38.5,
    'minLon': 63.5,
    'maxLon': 99.5
}

CODE_LENGTH = 10
SEPARATOR = '-'

# Reverse lookup so decoding never scans the grid
CHAR_TO_INDEX = {
    char: (r, c)
    for r, row_list in enumerate(DIGIPIN_GRID)
    for c, char in enumerate(row_list)
}

ALPHABET = frozenset(CHAR_TO_INDEX)


class Cell(NamedTuple):
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    @property
    def centroid(self) -> tuple[float, float]:
        return (self.min_lat + self.max_lat) / 2, (self.min_lon + self.max_lon) / 2


ROOT_CELL = Cell(BOUNDS['minLat'], BOUNDS['maxLat'], BOUNDS['minLon'], BOUNDS['maxLon'])


def format_code(symbols: str) -> str:
    """Inserts the display separators after the 3rd and 6th symbol."""
    return f"{symbols[:3]}{SEPARATOR}{symbols[3:6]}{SEPARATOR}{symbols[6:]}"


def normalize_code(digipin: str) -> str:
    """
    Strips separators and validates a DIGIPIN.

    Returns:
        The bare 10-symbol code.

    Raises:
        InvalidLengthError: If the code is not 10 symbols once hyphens are removed.
        InvalidSymbolError: On the first character outside the DIGIPIN alphabet.
    """
    pin = digipin.replace(SEPARATOR, '')
    if len(pin) != CODE_LENGTH:
        raise InvalidLengthError(len(pin))
    for char in pin:
        if char not in ALPHABET:
            raise InvalidSymbolError(char)
    return pin


def encode(lat: float, lon: float) -> str:
    """
    Walks ten levels of the 4x4 grid down to the cell holding (lat, lon).

    Args:
        lat: Degrees north, within BOUNDS minLat..maxLat inclusive.
        lon: Degrees east, within BOUNDS minLon..maxLon inclusive.

    Returns:
        One grid symbol per level, grouped 3-3-4 with hyphens ("4P3-JK8-52C9").

    Raises:
        OutOfRangeError: Naming whichever coordinate falls outside BOUNDS,
            latitude being checked first.
    """
    if not (BOUNDS['minLat'] <= lat <= BOUNDS['maxLat']):
        raise OutOfRangeError('latitude', BOUNDS['minLat'], BOUNDS['maxLat'])
    if not (BOUNDS['minLon'] <= lon <= BOUNDS['maxLon']):
        raise OutOfRangeError('longitude', BOUNDS['minLon'], BOUNDS['maxLon'])

    cell = ROOT_CELL
    digipin_chars = []

    for _ in range(CODE_LENGTH):
        lat_div = (cell.max_lat - cell.min_lat) / 4
        lon_div = (cell.max_lon - cell.min_lon) / 4

        # Rows count down from the north edge
        row = 3 - math.floor((lat - cell.min_lat) / lat_div)
        col = math.floor((lon - cell.min_lon) / lon_div)

        # A point on the north or east edge lands on index 4 (row -1)
        row = max(0, min(row, 3))
        col = max(0, min(col, 3))

        digipin_chars.append(DIGIPIN_GRID[row][col])

        min_lon = cell.min_lon + lon_div * col
        cell = Cell(
            min_lat=cell.min_lat + lat_div * (3 - row),
            max_lat=cell.min_lat + lat_div * (4 - row),
            min_lon=min_lon,
            max_lon=min_lon + lon_div,
        )

    return format_code(''.join(digipin_chars))


def decode_cell(digipin: str) -> Cell:
    """Returns the final subdivision cell a DIGIPIN names (hyphens optional)."""
    cell = ROOT_CELL

    for char in normalize_code(digipin):
        ri, ci = CHAR_TO_INDEX[char]

        lat_div = (cell.max_lat - cell.min_lat) / 4
        lon_div = (cell.max_lon - cell.min_lon) / 4

        cell = Cell(
            min_lat=cell.max_lat - lat_div * (ri + 1),
            max_lat=cell.max_lat - lat_div * ri,
            min_lon=cell.min_lon + lon_div * ci,
            max_lon=cell.min_lon + lon_div * (ci + 1),
        )

    return cell


def decode(digipin: str) -> dict:
    """
    Maps a DIGIPIN to the centre point of the cell it names.

    Args:
        digipin: Ten grid symbols, with or without the display hyphens.

    Returns:
        {'latitude': str, 'longitude': str}, each fixed to 6 decimal places.

    Raises:
        InvalidLengthError: If the DIGIPIN is not 10 symbols long.
        InvalidSymbolError: If the DIGIPIN contains a character outside the grid.
    """
    center_lat, center_lon = decode_cell(digipin).centroid

    return {
        'latitude': f"{center_lat:.6f}",
        'longitude': f"{center_lon:.6f}"
    }
