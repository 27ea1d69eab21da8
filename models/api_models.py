from pydantic import BaseModel, Field
from typing import Dict


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Short description of what failed")
    details: str = Field("", description="Underlying error message")


class RateLimitResponse(BaseModel):
    error: str
    retryAfter: int = Field(..., description="Milliseconds until the next request is accepted")


class HealthResponse(BaseModel):
    status: str
    message: str


class ServiceIndexResponse(BaseModel):
    message: str
    version: str
    docs: str
    openapi: str
    endpoints: Dict[str, str]
