# digipin_service/main.py
import io
import logging
from pathlib import PurePath
from typing import Any, Optional

from fastapi import Body, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config
from .digipin import decode, encode
from .exceptions import BatchInputError, DigipinError
from .geometry import cell_feature
from .processing import run_decode_pipeline, run_encode_pipeline
from .schemas import DecodeResponse, EncodeResponse, ErrorResponse, HealthResponse
from .validation import RequestValidationFailed, parse_coordinates, parse_digipin

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="DIGIPIN API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)

ERROR_RESPONSES = {400: {"model": ErrorResponse}}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# --- Error translation ---

@app.exception_handler(DigipinError)
async def digipin_error_handler(request: Request, exc: DigipinError):
    return _error(400, str(exc))


@app.exception_handler(RequestValidationFailed)
async def request_validation_failed_handler(request: Request, exc: RequestValidationFailed):
    return _error(400, str(exc))


@app.exception_handler(BatchInputError)
async def batch_input_error_handler(request: Request, exc: BatchInputError):
    return _error(400, str(exc))


@app.exception_handler(RequestValidationError)
async def fastapi_validation_error_handler(request: Request, exc: RequestValidationError):
    messages = [err.get("msg", "Invalid request") for err in exc.errors()]
    return _error(400, ", ".join(messages) or "Invalid request")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


# --- Codec endpoints ---

@app.get("/api/digipin/encode", response_model=EncodeResponse, responses=ERROR_RESPONSES)
async def encode_get(latitude: Optional[str] = None, longitude: Optional[str] = None):
    """Encodes latitude and longitude query parameters into a DIGIPIN."""
    lat, lon = parse_coordinates(latitude, longitude)
    return {"digipin": encode(lat, lon)}


@app.post("/api/digipin/encode", response_model=EncodeResponse, responses=ERROR_RESPONSES)
async def encode_post(payload: Optional[dict[str, Any]] = Body(None)):
    """Encodes a JSON body of the form {"latitude": ..., "longitude": ...}."""
    payload = payload or {}
    lat, lon = parse_coordinates(payload.get("latitude"), payload.get("longitude"))
    return {"digipin": encode(lat, lon)}


@app.get("/api/digipin/decode", response_model=DecodeResponse, responses=ERROR_RESPONSES)
async def decode_get(digipin: Optional[str] = None):
    """Decodes a DIGIPIN (hyphens optional) into the centre of its cell."""
    return decode(parse_digipin(digipin))


@app.post("/api/digipin/decode", response_model=DecodeResponse, responses=ERROR_RESPONSES)
async def decode_post(payload: Optional[dict[str, Any]] = Body(None)):
    payload = payload or {}
    return decode(parse_digipin(payload.get("digipin")))


@app.get("/api/digipin/bounds", responses=ERROR_RESPONSES)
async def bounds_get(digipin: Optional[str] = None):
    """Returns the cell a DIGIPIN names as a GeoJSON Feature."""
    return cell_feature(parse_digipin(digipin))


# --- Batch endpoints ---

def _csv_download(result_df, upload: UploadFile, suffix: str) -> StreamingResponse:
    stem = PurePath(upload.filename or "digipins").stem
    download_name = f"{stem}_{suffix}.csv"
    buffer = io.StringIO()
    result_df.to_csv(buffer, index=False)

    return StreamingResponse(
        iter([buffer.getvalue()]),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{download_name}"'},
    )


@app.post("/api/digipin/batch/encode", responses=ERROR_RESPONSES)
def batch_encode(file: UploadFile = File(...)):
    """
    Encodes every row of an uploaded CSV.

    The CSV needs a latitude and a longitude column. The response is the same
    CSV with 'digipin' and 'digipin_error' columns appended.
    """
    try:
        result_df = run_encode_pipeline(file.file)
    except BatchInputError:
        raise
    except Exception as e:
        logger.exception("Batch encode of %s failed", file.filename)
        raise HTTPException(status_code=500, detail=f"An error occurred during processing: {e}")
    return _csv_download(result_df, file, "encoded")


@app.post("/api/digipin/batch/decode", responses=ERROR_RESPONSES)
def batch_decode(file: UploadFile = File(...)):
    """
    Decodes every row of an uploaded CSV.

    The CSV needs a digipin column. The response is the same CSV with
    'latitude', 'longitude' and 'digipin_error' columns appended.
    """
    try:
        result_df = run_decode_pipeline(file.file)
    except BatchInputError:
        raise
    except Exception as e:
        logger.exception("Batch decode of %s failed", file.filename)
        raise HTTPException(status_code=500, detail=f"An error occurred during processing: {e}")
    return _csv_download(result_df, file, "decoded")


@app.get("/health", response_model=HealthResponse)
async def health():
    return {"status": "ok"}
