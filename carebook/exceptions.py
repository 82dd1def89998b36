"""Custom exceptions and error formatting for the invoicing service.

Every domain error carries a user-facing message, a machine-readable code
and the HTTP status the API layer answers with.
"""
from typing import Optional, Dict, Any
from datetime import date


class ServiceError(Exception):
    """Base class for domain errors with user-friendly messages."""

    status_code = 400

    def __init__(self, message: str, error_code: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize service error.

        Args:
            message: User-friendly error message
            error_code: Machine-readable error code
            details: Optional additional error details
        """
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary format for API responses.

        Returns:
            Dictionary with error information
        """
        return {
            "success": False,
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details
            }
        }


class ValidationError(ServiceError):
    """Error raised when request data is missing or malformed."""


class MissingFieldError(ValidationError):
    """Error raised when a required field is missing."""

    def __init__(self, field_name: str):
        """
        Initialize missing field error.

        Args:
            field_name: Name of the missing field
        """
        field_names = {
            "id": "Invoice ID",
            "invoice_number": "Invoice number",
            "invoice_date": "Invoice date",
            "carer_ids": "Carer",
            "carer_id": "Carer",
            "client_id": "Client",
            "date_from": "Period start",
            "date_to": "Period end",
            "file_name": "File name",
            "name": "Name",
            "config": "Calendar configuration",
            "username": "Username",
            "password": "Password",
        }

        field_display = field_names.get(field_name, field_name)
        super().__init__(
            message=f"{field_display} is required.",
            error_code="MISSING_FIELD",
            details={"field_name": field_name}
        )


class InvalidDateRangeError(ValidationError):
    """Error raised when a period starts after it ends."""

    def __init__(self, date_from: date, date_to: date):
        super().__init__(
            message=(
                f"Start date ({date_from.isoformat()}) must be before or "
                f"equal to end date ({date_to.isoformat()})."
            ),
            error_code="INVALID_DATE_RANGE",
            details={
                "date_from": date_from.isoformat(),
                "date_to": date_to.isoformat()
            }
        )


class DuplicateInvoiceNumberError(ServiceError):
    """Error raised when an invoice number is already in use."""

    def __init__(self, invoice_number: str):
        """
        Initialize duplicate invoice number error.

        Args:
            invoice_number: The colliding invoice number
        """
        super().__init__(
            message=f"Invoice number {invoice_number} already exists.",
            error_code="DUPLICATE_INVOICE_NUMBER",
            details={"invoice_number": invoice_number}
        )


class NotFoundError(ServiceError):
    """Error raised when a requested resource is not found."""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: Any):
        """
        Initialize not found error.

        Args:
            resource_type: Type of resource (e.g., "invoice", "carer", "client")
            resource_id: ID or lookup key of the resource
        """
        super().__init__(
            message=f"{resource_type.replace('_', ' ').capitalize()} not found. (ID: {resource_id})",
            error_code="RESOURCE_NOT_FOUND",
            details={
                "resource_type": resource_type,
                "resource_id": str(resource_id)
            }
        )


class AuthenticationError(ServiceError):
    """Error raised when credentials or a session are not valid."""

    status_code = 401

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message=message, error_code="NOT_AUTHENTICATED")


class UpstreamStoreError(ServiceError):
    """Error raised when a call to the record store failed or was rejected.

    A rejected write (constraint violation) is the caller's fault and maps
    to 400; anything else is an infrastructure fault and maps to 500.
    """

    def __init__(self, operation: str, table: str, message: str, constraint_violation: bool = False):
        """
        Initialize upstream store error.

        Args:
            operation: Gateway operation that failed (select, insert, ...)
            table: Table the operation targeted
            message: Message reported by the store
            constraint_violation: True if the store rejected the write
        """
        self.operation = operation
        self.table = table
        self.constraint_violation = constraint_violation
        super().__init__(
            message=message,
            error_code="STORE_REJECTED" if constraint_violation else "STORE_UNAVAILABLE",
            details={"operation": operation, "table": table}
        )

    @property
    def status_code(self) -> int:
        return 400 if self.constraint_violation else 500


class RegenerationError(ServiceError):
    """Error raised when an invoice cannot be regenerated from its record."""

    status_code = 500

    def __init__(self, invoice_number: str):
        super().__init__(
            message="Failed to download invoice.",
            error_code="REGENERATION_FAILED",
            details={"invoice_number": invoice_number}
        )


def format_error_for_api(error: ServiceError) -> Dict[str, Any]:
    """
    Format service error for API response.

    Args:
        error: Service error to format

    Returns:
        Dictionary suitable for JSON API response
    """
    return error.to_dict()


def internal_error_body() -> Dict[str, Any]:
    """Body returned for unexpected failures."""
    return {
        "success": False,
        "error": {
            "code": "INTERNAL_ERROR",
            "message": "An unexpected error occurred.",
            "details": {}
        }
    }
