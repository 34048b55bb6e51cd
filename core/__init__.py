"""Core utilities and configuration for ReportBuilder"""
from core.config import settings
from core.exceptions import CompileError, ExternalAPIError, ReportBuilderError, ValidationError
from core.logging import get_logger

__all__ = [
    "settings",
    "get_logger",
    "ReportBuilderError",
    "ValidationError",
    "ExternalAPIError",
    "CompileError",
]
