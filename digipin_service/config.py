# digipin_service/config.py
import os

from dotenv import load_dotenv

# Load environment variables from .env file for local development
load_dotenv()

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# --- HTTP ---
CORS_ALLOW_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",")
    if origin.strip()
]

# --- Batch processing ---
COLUMN_MAPPING_FILE_PATH = os.getenv("COLUMN_MAPPING_FILE_PATH", "data/column_mapping.yml")
BATCH_MAX_ROWS = int(os.getenv("BATCH_MAX_ROWS", 100_000))
