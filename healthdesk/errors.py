"""Error taxonomy shared by tools, the orchestrator and the REST routes.

Every error carries a stable ``code`` (what tool results and logs report) and
an HTTP ``status_code`` (what a route answers when the error escapes it).
"""


class HealthdeskError(Exception):
    code = "error"
    status_code = 500
    default_message = "An error occurred while processing your request!"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class ValidationError(HealthdeskError):
    code = "validation_error"
    status_code = 400
    default_message = "Invalid request body"


class Unauthenticated(HealthdeskError):
    code = "unauthenticated"
    status_code = 401
    default_message = "User not authenticated"


class Forbidden(HealthdeskError):
    code = "forbidden"
    status_code = 403
    default_message = "Forbidden"


class NotFound(HealthdeskError):
    """Missing record. Also raised for records owned by another user."""

    code = "not_found"
    status_code = 404
    default_message = "Not found"


class RateLimited(HealthdeskError):
    code = "rate_limited"
    status_code = 429
    default_message = (
        "You have exceeded your maximum number of messages for the day! "
        "Please try again later."
    )


class DomainInvariantViolation(HealthdeskError):
    code = "domain_invariant"
    status_code = 409
    default_message = "The requested change is not permitted"


class NotRefillable(DomainInvariantViolation):
    code = "not_refillable"
    default_message = (
        "Prescription is not refillable, has no refills remaining, or is invalid"
    )


class UpstreamFailure(HealthdeskError):
    code = "upstream_failure"
    status_code = 502
    default_message = "Upstream provider failed"
