"""Error taxonomy for the search pipeline.

Every error carries the HTTP-equivalent status the transport reports and a
short ``error`` label for the failure envelope. The dispatcher catches all of
them; none of these should reach a transport.
"""


class RentalSearchError(Exception):
    """Base exception for rental search failures."""

    status_code = 500
    label = "Search failed"


class ValidationError(RentalSearchError):
    """Raised for bad or missing client input. Never retried."""

    status_code = 400
    label = "Invalid request"


class ConfigurationError(RentalSearchError):
    """Raised when the model API credential is missing."""

    label = "Service not configured"


class ModelGatewayError(RentalSearchError):
    """Base exception for failed completion calls."""

    label = "Model call failed"


class UpstreamError(ModelGatewayError):
    """Raised when the completion endpoint answers with a non-2xx status or
    cannot be reached at all (``status_code`` is then None)."""

    def __init__(self, upstream_status: int | None, body: str):
        self.upstream_status = upstream_status
        self.body = body
        if upstream_status is None:
            message = f"Completion request failed: {body}"
        else:
            message = f"Completion endpoint returned {upstream_status}: {body[:500]}"
        super().__init__(message)


class MalformedResponseError(ModelGatewayError):
    """Raised when a 2xx reply lacks ``choices[0].message.content``."""

    label = "Malformed model response"


class ParseError(RentalSearchError):
    """Raised when no usable JSON value can be recovered from a model reply."""

    label = "Unparsable model response"


class SynthesisNotAvailable(RentalSearchError):
    """Raised in strict real-data mode where fallback data would otherwise be used."""

    label = "Real data unavailable"
