class GatewayError(Exception):
    """
    Base for every error that reaches the HTTP boundary.
    - status_code: HTTP status returned to the caller
    - code: stable machine-readable code
    - message: public, generic text (never provider detail)
    """

    status_code = 500
    code = "INTERNAL_ERROR"
    message = "Internal error"

    def __init__(self, message: str | None = None):
        if message:
            self.message = message
        super().__init__(self.message)


class Unauthenticated(GatewayError):
    status_code = 401
    code = "UNAUTHENTICATED"
    message = "Unauthorized. Please sign in."


class InvalidInput(GatewayError):
    status_code = 400
    code = "INVALID_INPUT"
    message = "Invalid request"


class MalformedEvent(GatewayError):
    status_code = 400
    code = "MALFORMED_EVENT"
    message = "Missing required fields"


class RateLimited(GatewayError):
    status_code = 429
    code = "RATE_LIMITED"
    message = "Rate limit exceeded. Please wait a moment before requesting more insights."


class InvalidSignature(GatewayError):
    status_code = 401
    code = "INVALID_SIGNATURE"
    message = "Invalid signature"


class UpstreamUnavailable(GatewayError):
    status_code = 500
    code = "UPSTREAM_UNAVAILABLE"
    message = "Service temporarily unavailable. Please try again later."


class PaymentRejected(GatewayError):
    status_code = 400
    code = "PAYMENT_REJECTED"
    message = "Payment initialization failed"


class LedgerUnavailable(UpstreamUnavailable):
    code = "LEDGER_UNAVAILABLE"
    message = "Internal error, will retry"


class RateLimiterUnavailable(UpstreamUnavailable):
    status_code = 503
    code = "RATE_LIMITER_UNAVAILABLE"
    message = "Service temporarily unavailable. Please try again later."
