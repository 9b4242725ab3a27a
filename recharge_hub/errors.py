from typing import Optional


class GatewayError(Exception):
    """Base for errors rendered to the caller as a failed envelope."""

    status_code = 500
    error = "Internal Server Error"

    def __init__(self, message: str, transaction_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.transaction_id = transaction_id


class RechargeValidationError(GatewayError):
    status_code = 400
    error = "Validation Error"


class UpstreamAuthoritativeError(GatewayError):
    """The upstream endpoint exists and rejected the request."""

    status_code = 400
    error = "API Error"

    def __init__(
        self,
        message: str,
        upstream_status: int,
        provider: str,
        transaction_id: Optional[str] = None,
    ):
        super().__init__(message, transaction_id)
        self.upstream_status = upstream_status
        self.provider = provider


class UpstreamUnreachable(GatewayError):
    status_code = 503
    error = "Service Unavailable"


class InternalGatewayError(GatewayError):
    status_code = 500
    error = "Internal Server Error"
