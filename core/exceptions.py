"""
Custom exceptions for ReportBuilder
Provides structured error handling for the export pipeline and its surfaces
"""
from typing import Any, Dict, List, Optional


class ReportBuilderError(Exception):
    """Base exception for all ReportBuilder errors"""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses"""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(ReportBuilderError):
    """Raised when input validation fails"""

    def __init__(self, message: str, field: Optional[str] = None, **details):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            details={"field": field, **details} if field else details,
            status_code=400,
        )


class ExternalAPIError(ReportBuilderError):
    """Raised when a remote resource cannot be retrieved"""

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        **details,
    ):
        super().__init__(
            message=f"{provider} error: {message}",
            error_code="EXTERNAL_API_ERROR",
            details={
                "provider": provider,
                "api_status_code": status_code,
                "response_body": response_body,
                **details,
            },
            status_code=502,
        )


class AssetFetchError(ExternalAPIError):
    """Raised when an image asset cannot be downloaded for inlining"""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        super().__init__(provider="asset", message=message, status_code=status_code, url=url)
        self.error_code = "ASSET_FETCH_ERROR"
        self.url = url


class CompileError(ReportBuilderError):
    """Raised when a template cannot be compiled under strict options"""

    def __init__(self, message: str, diagnostics: Optional[List[Dict[str, Any]]] = None):
        super().__init__(
            message=message,
            error_code="COMPILE_ERROR",
            details={"diagnostics": diagnostics or []},
            status_code=422,
        )
