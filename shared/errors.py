"""
Shared error handling for the course entitlements engine.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from shared.logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""
    
    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class EngineException(Exception):
    """Base exception for the entitlements engine."""

    status_code = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)
    
    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            trace_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class ValidationError(EngineException):
    """Validation-related errors."""
    
    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class RegistryIntegrityError(EngineException):
    """Plan registry violates one of its startup invariants."""

    status_code = 500
    
    def __init__(self, message: str = "Plan registry is inconsistent", details: Optional[Dict[str, Any]] = None):
        super().__init__("REGISTRY_INTEGRITY_ERROR", message, details)

