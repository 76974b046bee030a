"""Alexa request signature verification.

Alexa signs every request it sends to a skill endpoint. The request carries
two headers:

- ``SignatureCertChainUrl``: where to download the PEM certificate chain
- ``Signature-256`` (or the legacy ``Signature``): base64 RSA signature of
  the raw request body

A request is accepted only if the certificate URL points at Amazon's bucket,
the downloaded chain is valid for ``echo-api.amazon.com`` and chains up to a
trusted root, the signature matches the exact body bytes, and the request
timestamp is recent.
"""

import base64
import binascii
import json
import logging
import posixpath
from datetime import datetime, timezone
from functools import lru_cache
from urllib.parse import urlsplit

import certifi
import httpx
from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.x509.verification import PolicyBuilder, Store, VerificationError

from ..errors import SignatureVerificationError

logger = logging.getLogger(__name__)

CERT_URL_HOST = "s3.amazonaws.com"
CERT_URL_PATH_PREFIX = "/echo.api/"
ECHO_API_DOMAIN = "echo-api.amazon.com"

# Timeout for downloading the certificate chain (seconds)
CERT_FETCH_TIMEOUT = 5.0


def validate_cert_url(cert_url: str) -> None:
    """Reject certificate URLs that do not point at Amazon's signing bucket."""
    parts = urlsplit(cert_url)

    if parts.scheme.lower() != "https":
        raise SignatureVerificationError(f"Cert URL scheme is not https: {cert_url}")
    if (parts.hostname or "").lower() != CERT_URL_HOST:
        raise SignatureVerificationError(f"Cert URL host is invalid: {parts.hostname}")

    try:
        port = parts.port
    except ValueError as e:
        raise SignatureVerificationError(f"Cert URL port is invalid: {cert_url}") from e
    if port not in (None, 443):
        raise SignatureVerificationError(f"Cert URL port is invalid: {port}")

    # Resolve "/echo.api/../" style paths before checking the prefix
    path = posixpath.normpath(parts.path) if parts.path else ""
    if not path.startswith(CERT_URL_PATH_PREFIX):
        raise SignatureVerificationError(f"Cert URL path is invalid: {parts.path}")


@lru_cache(maxsize=1)
def _trust_store() -> Store:
    """Root certificates from the certifi bundle."""
    with open(certifi.where(), "rb") as f:
        return Store(x509.load_pem_x509_certificates(f.read()))


def validate_cert_chain(chain: list[x509.Certificate], now: datetime) -> x509.Certificate:
    """Check the signing chain and return its leaf certificate."""
    if not chain:
        raise SignatureVerificationError("Certificate chain is empty")

    leaf, intermediates = chain[0], chain[1:]

    if now < leaf.not_valid_before_utc or now > leaf.not_valid_after_utc:
        raise SignatureVerificationError("Certificate is expired or not yet valid")

    try:
        san = leaf.extensions.get_extension_for_class(x509.SubjectAlternativeName)
    except x509.ExtensionNotFound as e:
        raise SignatureVerificationError("Certificate has no SAN extension") from e
    dns_names = san.value.get_values_for_type(x509.DNSName)
    if ECHO_API_DOMAIN not in dns_names:
        raise SignatureVerificationError(f"Certificate SAN does not include {ECHO_API_DOMAIN}")

    verifier = (
        PolicyBuilder()
        .store(_trust_store())
        .time(now.replace(tzinfo=None))  # naive UTC
        .build_server_verifier(x509.DNSName(ECHO_API_DOMAIN))
    )
    try:
        verifier.verify(leaf, intermediates)
    except VerificationError as e:
        raise SignatureVerificationError(f"Certificate chain is not trusted: {e}") from e

    return leaf


def validate_signature(
    cert: x509.Certificate,
    signature_b64: str,
    body: bytes,
    algorithm: hashes.HashAlgorithm,
) -> None:
    """Check the base64 RSA signature of the raw body against the certificate key."""
    try:
        signature = base64.b64decode(signature_b64, validate=True)
    except (binascii.Error, ValueError) as e:
        raise SignatureVerificationError("Signature is not valid base64") from e

    public_key = cert.public_key()
    if not isinstance(public_key, rsa.RSAPublicKey):
        raise SignatureVerificationError("Certificate key is not RSA")

    try:
        public_key.verify(signature, body, padding.PKCS1v15(), algorithm)
    except InvalidSignature as e:
        raise SignatureVerificationError("Signature does not match request body") from e


def validate_timestamp(body: bytes, now: datetime, tolerance_seconds: int) -> None:
    """Check that ``request.timestamp`` is within the tolerance window."""
    try:
        data = json.loads(body)
        timestamp = data["request"]["timestamp"]
        request_time = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise SignatureVerificationError("Request timestamp is missing or invalid") from e

    if request_time.tzinfo is None:
        request_time = request_time.replace(tzinfo=timezone.utc)

    delta = abs((now - request_time).total_seconds())
    if delta > tolerance_seconds:
        raise SignatureVerificationError(f"Request timestamp is {delta:.0f}s away from now")


async def fetch_cert_chain(cert_url: str, timeout: float = CERT_FETCH_TIMEOUT) -> list[x509.Certificate]:
    """Download and parse the PEM certificate chain."""
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(cert_url)
            response.raise_for_status()
    except httpx.HTTPError as e:
        raise SignatureVerificationError(f"Could not download certificate chain: {e}") from e

    try:
        return x509.load_pem_x509_certificates(response.content)
    except ValueError as e:
        raise SignatureVerificationError("Certificate chain is not valid PEM") from e


async def verify_request_signature(
    cert_url: str | None,
    signature: str | None,
    body: bytes,
    signature_256: str | None = None,
    tolerance_seconds: int = 150,
) -> None:
    """
    Verify that a request was sent by Alexa.

    Args:
        cert_url: Value of the ``SignatureCertChainUrl`` header
        signature: Value of the legacy ``Signature`` header (SHA-1)
        body: Raw request body, exactly as received
        signature_256: Value of the ``Signature-256`` header, preferred when present
        tolerance_seconds: Maximum allowed age of ``request.timestamp``

    Raises:
        SignatureVerificationError: If any check fails
    """
    if not cert_url or not (signature or signature_256):
        raise SignatureVerificationError("Missing signature headers")

    validate_cert_url(cert_url)

    chain = await fetch_cert_chain(cert_url)
    now = datetime.now(timezone.utc)
    cert = validate_cert_chain(chain, now)

    if signature_256:
        validate_signature(cert, signature_256, body, hashes.SHA256())
    else:
        validate_signature(cert, signature, body, hashes.SHA1())

    validate_timestamp(body, now, tolerance_seconds)

    logger.debug("Alexa request signature verified")
