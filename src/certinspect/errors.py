"""
Error classification for certificate inspection.

Provides error codes, the exception hierarchy raised by the parser, and
classification helpers that map library exceptions to codes for
diagnostics.
"""

import binascii
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple

from cryptography.exceptions import UnsupportedAlgorithm
from pyasn1.error import PyAsn1Error


class ErrorCode(str, Enum):
    """Specific error codes for detailed failure diagnostics."""

    # Format errors
    PEM_MARKERS_MISSING = "PEM_MARKERS_MISSING"
    INPUT_TOO_LARGE = "INPUT_TOO_LARGE"

    # Decode errors
    DER_MALFORMED = "DER_MALFORMED"
    NOT_A_CERTIFICATE = "NOT_A_CERTIFICATE"
    UNSUPPORTED_KEY_TYPE = "UNSUPPORTED_KEY_TYPE"

    # Remote lookup
    LOOKUP_FAILED = "LOOKUP_FAILED"

    # General
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


@dataclass
class CertificateError(Exception):
    """
    Base exception for certificate inspection errors.

    Preserves error code and detailed information for downstream
    error handling and display.
    """

    message: str
    error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR
    error_details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message


@dataclass
class FormatError(CertificateError):
    """PEM boundary markers missing or malformed; nothing was decoded."""

    error_code: ErrorCode = ErrorCode.PEM_MARKERS_MISSING


@dataclass
class DecodeError(CertificateError):
    """Certificate body could not be decoded. The cause is chained."""

    error_code: ErrorCode = ErrorCode.DER_MALFORMED


@dataclass
class MetadataLookupError(CertificateError):
    """Remote certificate metadata lookup failed."""

    error_code: ErrorCode = ErrorCode.LOOKUP_FAILED


def classify_decode_error(e: Exception) -> Tuple[ErrorCode, Dict[str, Any]]:
    """
    Classify an exception raised while decoding a certificate.

    Args:
        e: The exception to classify

    Returns:
        Tuple of (ErrorCode, error_details dict)
    """
    details: Dict[str, Any] = {
        "exception_type": type(e).__name__,
        "exception_module": type(e).__module__,
        "raw_message": str(e),
    }

    if isinstance(e, UnsupportedAlgorithm):
        return ErrorCode.UNSUPPORTED_KEY_TYPE, details

    if isinstance(e, binascii.Error):
        return ErrorCode.DER_MALFORMED, details

    if isinstance(e, PyAsn1Error):
        return ErrorCode.DER_MALFORMED, details

    msg = str(e).lower()
    if "unsupported" in msg and ("key" in msg or "algorithm" in msg):
        return ErrorCode.UNSUPPORTED_KEY_TYPE, details
    elif "no pem" in msg or "unable to load pem" in msg or "valid pem" in msg:
        return ErrorCode.NOT_A_CERTIFICATE, details
    elif "certificate" in msg or "x509" in msg or "x.509" in msg:
        return ErrorCode.NOT_A_CERTIFICATE, details
    elif isinstance(e, ValueError):
        return ErrorCode.DER_MALFORMED, details

    return ErrorCode.UNKNOWN_ERROR, details
