"""
Custom exceptions for the Import Fixer.

This module defines the exception hierarchy used throughout the application
for reporting tool, buffer and configuration failures to the caller.
"""


class ImportFixerError(Exception):
    """Base exception for all Import Fixer errors."""
    
    def __init__(self, message: str, details: str = None):
        self.message = message
        self.details = details
        super().__init__(self.message)
    
    def __str__(self):
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class ToolNotFoundError(ImportFixerError):
    """Raised when the analyzer or sorter executable cannot be located."""
    
    def __init__(self, message: str = "External tool not found", details: str = None):
        super().__init__(message, details)


class ToolTimeoutError(ImportFixerError):
    """Raised when an external tool does not finish within its timeout."""
    
    def __init__(self, message: str = "External tool timed out", details: str = None):
        super().__init__(message, details)


class EmptyBufferError(ImportFixerError):
    """Raised when an operation is invoked on a buffer with no content."""
    
    def __init__(self, message: str = "Buffer is empty", details: str = None):
        super().__init__(message, details)


class ConfigurationError(ImportFixerError):
    """Raised when configuration is invalid or missing."""
    
    def __init__(self, message: str = "Configuration error", details: str = None):
        super().__init__(message, details)
