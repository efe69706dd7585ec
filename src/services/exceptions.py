"""
Customer service exceptions

Raised by the service layer and translated into JSON error envelopes by the
handlers registered in utils.error_handling.
"""

from typing import Optional


class CustomerServiceError(Exception):
    """Base exception for all customer/address errors"""

    status_code = 500

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self):
        body = {"error": self.message}
        if self.field:
            body["field"] = self.field
        return body


class ValidationError(CustomerServiceError):
    """Missing or malformed input, detected before any store access"""

    status_code = 400


class NotFoundError(CustomerServiceError):
    """The customer or address id did not match any row"""

    status_code = 404


class ConflictError(CustomerServiceError):
    """A customer with the same name and phone number already exists"""

    status_code = 409


class StoreError(CustomerServiceError):
    """Query, transaction or connection failure in the database"""

    status_code = 500
