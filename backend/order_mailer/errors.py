# order_mailer/errors.py
from typing import Any, Optional


class ConfigurationError(RuntimeError):
    """A required setting is missing or malformed. Raised at startup only."""


class PayloadValidationError(ValueError):
    def __init__(self, message: str, details: Any = None):
        super().__init__(message)
        self.message = message
        self.details = details


class DeliveryError(Exception):
    """
    The outbound provider call failed.
    status_code / response_body are set when the provider actually answered.
    """

    def __init__(
        self,
        message: str = "",
        *,
        status_code: Optional[int] = None,
        response_body: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_body = response_body


class DeliveryTimeoutError(DeliveryError):
    pass
