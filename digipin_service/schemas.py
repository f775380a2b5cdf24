# digipin_service/schemas.py
from pydantic import BaseModel, Field


class EncodeResponse(BaseModel):
    digipin: str = Field(..., examples=["4P3-JK8-52C9"])


class DecodeResponse(BaseModel):
    latitude: str = Field(..., description="Cell centre latitude, 6 decimal places")
    longitude: str = Field(..., description="Cell centre longitude, 6 decimal places")


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str = "ok"
