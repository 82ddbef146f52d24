"""Common response schemas."""
from pydantic import BaseModel
from typing import List, Optional


class SuccessResponse(BaseModel):
    """Standard success response."""
    success: bool = True
    message: Optional[str] = None


class ErrorDetail(BaseModel):
    """Error detail structure."""
    code: str
    message: str
    errors: Optional[List[str]] = None
    retry_after: Optional[int] = None


class ErrorResponse(BaseModel):
    """Standard error response, returned for every failed action."""
    success: bool = False
    error: ErrorDetail
