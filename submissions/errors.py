from typing import Dict, List


class GatewayError(Exception):
    """Base class for failures reported to the client as a structured response."""
    status_code = 400

    def as_body(self) -> dict:
        return {"error": str(self)}


class ValidationError(GatewayError):
    """Raised for invalid query parameters."""


class InvalidFieldError(ValidationError):
    """Raised for the first requested field that is not exposable."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"invalid field {field}")


class PayloadValidationError(GatewayError):
    """Raised when a submission body fails validation."""
    status_code = 422

    def __init__(self, errors: Dict[str, List[str]]):
        self.errors = errors
        super().__init__("; ".join(f"{k}: {', '.join(v)}" for k, v in errors.items()))

    def as_body(self) -> dict:
        return self.errors


class CapacityError(GatewayError):
    """Raised when the task queue is at or above its configured size."""
    status_code = 503


class FeatureDisabledError(GatewayError):
    """Raised when a globally disabled operation is requested."""


class LifecycleError(GatewayError):
    """Raised when a submission's status does not permit the operation."""


class EncodingError(GatewayError):
    """Raised when attributes cannot be rendered as UTF-8 text."""
