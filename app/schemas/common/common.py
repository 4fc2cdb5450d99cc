# app/schemas/common/common.py
from pydantic import BaseModel
from typing import Optional

class ErrorResponse(BaseModel):
    success: bool = False
    data: None = None
    error: str
    code: Optional[str] = None

class HealthResponse(BaseModel):
    status: str
    app: str
    version: str
    database: bool
