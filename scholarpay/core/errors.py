"""Exception hierarchy for ScholarPay."""


class ScholarPayError(Exception):
    """Base class for all ScholarPay errors."""


class ApplicationValidationError(ScholarPayError):
    """Raised when a submitted application fails field validation."""


class ApplicationNotFoundError(ScholarPayError):
    """Raised when an application id does not exist."""

    def __init__(self, application_id: str) -> None:
        """Remember the missing application id."""
        super().__init__(f"Application not found: {application_id}")
        self.application_id = application_id


class PersistenceError(ScholarPayError):
    """Raised when the application store cannot be read or written."""


class ProviderError(ScholarPayError):
    """Raised when the payment provider cannot be reached or rejects a request."""
