"""Exceptions raised while bridging an Alexa request."""


class BridgeError(Exception):
    """Base class for errors the Alexa handler turns into a speech response."""


class PayloadTooLargeError(BridgeError):
    """Inbound body exceeded the configured size ceiling."""

    def __init__(self, limit: int):
        super().__init__(f"Request body exceeds {limit} bytes")
        self.limit = limit


class SignatureVerificationError(BridgeError):
    """Request signature, certificate chain or timestamp could not be verified."""


class MalformedRequestError(BridgeError):
    """Inbound body is not a JSON object."""


class ConfigurationError(BridgeError):
    """A setting required to serve the request is missing."""


class DownstreamError(BridgeError):
    """The downstream webhook call failed (network, timeout or HTTP status)."""
