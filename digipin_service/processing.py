# digipin_service/processing.py
import logging

import pandas as pd
import yaml
from tqdm import tqdm

from . import config
from .digipin import decode, encode
from .exceptions import BatchInputError, DigipinError

tqdm.pandas()

logger = logging.getLogger(__name__)

DEFAULT_COLUMN_ALIASES = {
    'latitude': ['latitude', 'lat'],
    'longitude': ['longitude', 'lon', 'lng'],
    'digipin': ['digipin', 'code'],
}

# Loaded lazily on the first batch request.
column_aliases_cache = None


def load_column_aliases(path: str = None) -> dict:
    """
    Loads the accepted CSV header names from the YAML mapping file.

    Falls back to the built-in aliases when the file does not exist. Fields
    missing from the file keep their built-in aliases.
    """
    path = path or config.COLUMN_MAPPING_FILE_PATH
    logger.info("Loading column mapping from %s", path)
    try:
        with open(path, 'r') as f:
            mapping_data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Column mapping file not found at %s. Using built-in aliases.", path)
        mapping_data = {}

    # A broken mapping file is a deployment problem, not a bad upload
    if not isinstance(mapping_data, dict):
        raise RuntimeError(f"Column mapping file {path} must contain a mapping of field to aliases")

    aliases = {field: list(names) for field, names in DEFAULT_COLUMN_ALIASES.items()}
    for field, names in mapping_data.items():
        if field not in aliases or not names:
            continue
        if isinstance(names, str):
            names = [names]
        elif not isinstance(names, list):
            raise RuntimeError(f"Aliases for {field!r} in {path} must be a name or a list of names")
        aliases[field] = [str(name) for name in names]
    return aliases


def get_column_aliases() -> dict:
    global column_aliases_cache

    if column_aliases_cache is None:
        column_aliases_cache = load_column_aliases()
    return column_aliases_cache


def resolve_column(df: pd.DataFrame, field: str, aliases: dict) -> str:
    """Finds the header in `df` matching one of the aliases for `field`."""
    lookup = {str(column).strip().lower(): column for column in df.columns}
    for alias in aliases[field]:
        column = lookup.get(alias.strip().lower())
        if column is not None:
            return column
    raise BatchInputError(
        f"CSV is missing a {field} column (accepted names: {', '.join(aliases[field])})"
    )


def read_upload(csv_file, max_rows: int = None, **read_kwargs) -> pd.DataFrame:
    max_rows = config.BATCH_MAX_ROWS if max_rows is None else max_rows
    try:
        # One row past the limit is enough to know the upload is too large
        df = pd.read_csv(csv_file, nrows=max_rows + 1, **read_kwargs)
    except pd.errors.EmptyDataError as e:
        raise BatchInputError("Uploaded CSV file is empty.") from e
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise BatchInputError(f"Could not parse uploaded CSV: {e}") from e

    if len(df) > max_rows:
        raise BatchInputError(f"Uploaded CSV exceeds the limit of {max_rows} rows.")
    return df


def _encode_pair(lat, lon):
    if pd.isna(lat) or pd.isna(lon):
        return None, "Missing or non-numeric coordinates"
    try:
        return encode(lat, lon), None
    except DigipinError as e:
        return None, str(e)


def _decode_value(value):
    if pd.isna(value) or not str(value).strip():
        return None, None, "Missing DIGIPIN"
    try:
        coords = decode(str(value).strip())
    except DigipinError as e:
        return None, None, str(e)
    return coords['latitude'], coords['longitude'], None


def run_encode_pipeline(csv_file, max_rows: int = None) -> pd.DataFrame:
    """
    Adds a DIGIPIN to every row of an uploaded CSV of coordinates.

    The input columns are left untouched. Two columns are appended:
    'digipin' holds the code, and 'digipin_error' holds the reason a row
    could not be encoded. Bad rows never abort the batch.
    """
    df = read_upload(csv_file, max_rows=max_rows)
    aliases = get_column_aliases()
    lat_col = resolve_column(df, 'latitude', aliases)
    lon_col = resolve_column(df, 'longitude', aliases)
    logger.info("Encoding %d rows using columns %r and %r", len(df), lat_col, lon_col)

    if df.empty:
        return df.assign(digipin=pd.Series(dtype=object), digipin_error=pd.Series(dtype=object))

    points = pd.DataFrame({
        'lat': pd.to_numeric(df[lat_col], errors='coerce'),
        'lon': pd.to_numeric(df[lon_col], errors='coerce'),
    })
    outcomes = points.progress_apply(lambda row: _encode_pair(row['lat'], row['lon']), axis=1)

    df['digipin'] = [code for code, _ in outcomes]
    df['digipin_error'] = [error for _, error in outcomes]

    failed_count = df['digipin'].isna().sum()
    if failed_count > 0:
        logger.warning("%d of %d rows could not be encoded", failed_count, len(df))
    logger.info("Encoding finished.")
    return df


def run_decode_pipeline(csv_file, max_rows: int = None) -> pd.DataFrame:
    """
    Adds the decoded centroid to every row of an uploaded CSV of DIGIPINs.

    Appends 'latitude', 'longitude' (6-decimal strings) and 'digipin_error'.
    """
    # Read as text so codes made only of digits keep their exact form
    df = read_upload(csv_file, max_rows=max_rows, dtype=str)
    aliases = get_column_aliases()
    code_col = resolve_column(df, 'digipin', aliases)
    logger.info("Decoding %d rows using column %r", len(df), code_col)

    if df.empty:
        return df.assign(
            latitude=pd.Series(dtype=object),
            longitude=pd.Series(dtype=object),
            digipin_error=pd.Series(dtype=object),
        )

    outcomes = df[code_col].progress_apply(_decode_value)

    df['latitude'] = [lat for lat, _, _ in outcomes]
    df['longitude'] = [lon for _, lon, _ in outcomes]
    df['digipin_error'] = [error for _, _, error in outcomes]

    failed_count = df['digipin_error'].notna().sum()
    if failed_count > 0:
        logger.warning("%d of %d rows could not be decoded", failed_count, len(df))
    logger.info("Decoding finished.")
    return df
