from typing import Optional, Dict, Any


class IdleWatchException(Exception):
    """Base exception for all IdleWatch errors."""
    def __init__(
        self,
        message: str,
        code: str = "internal_error",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

class ConfigurationError(IdleWatchException):
    """Raised when application configuration is invalid or missing."""
    def __init__(self, message: str, code: str = "config_error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, status_code=500, details=details)

class ProviderError(IdleWatchException):
    """Raised when an AWS listing or metrics call fails. Aborts the in-flight scan."""
    def __init__(self, message: str, code: str = "provider_error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, status_code=500, details=details)

class PriceLookupError(IdleWatchException):
    """Raised inside the price gateway; callers only ever see a price of 0."""
    def __init__(self, message: str, code: str = "price_lookup_error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, status_code=500, details=details)

class DeliveryError(IdleWatchException):
    """Raised when the notification email cannot be sent."""
    def __init__(self, message: str, code: str = "delivery_error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code=code, status_code=500, details=details)

class InvalidServiceKindError(IdleWatchException):
    """Raised when a request names a service kind that is not scanned."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="invalid_service", status_code=500, details=details)
