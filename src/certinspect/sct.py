"""
Certificate Transparency SCT list interpretation.

`cryptography` decodes the SCT list extensions (RFC 6962, section 3.3)
into SignedCertificateTimestamp objects. This module turns them into
display models. Lists the library rejects, and the precertificate
poison, yield no SCTs.
"""

import logging
from datetime import timezone
from typing import Optional, Tuple

from cryptography import x509
from cryptography.x509.certificate_transparency import (
    SignatureAlgorithm,
    SignedCertificateTimestamp as LibrarySct,
)

from .formatting import colon_hex
from .models import SignedCertificateTimestamp

logger = logging.getLogger(__name__)

SCT_LIST_TYPES = (
    x509.PrecertificateSignedCertificateTimestamps,
    x509.SignedCertificateTimestamps,
)


def signature_algorithm_name(hash_name: str, signature: SignatureAlgorithm) -> str:
    """Name an SCT (hash, signature) algorithm pair the way OpenSSL does."""
    hash_name = hash_name.upper()
    if signature == SignatureAlgorithm.ECDSA:
        return f"ecdsa-with-{hash_name}"
    if signature == SignatureAlgorithm.RSA:
        return f"{hash_name.lower()}WithRSAEncryption"
    if signature == SignatureAlgorithm.DSA:
        return f"dsa_with_{hash_name}"
    return f"{hash_name}/{signature.name.lower()}"


def describe_sct(sct: LibrarySct) -> SignedCertificateTimestamp:
    """Build the display model for one SCT."""
    version = sct.version.value
    timestamp = sct.timestamp
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    algorithm = signature_algorithm_name(
        sct.signature_hash_algorithm.name, sct.signature_algorithm
    )
    return SignedCertificateTimestamp(
        version=f"v{version + 1} (0x{version:x})",
        log_id=colon_hex(sct.log_id),
        timestamp=timestamp,
        signature=f"{algorithm}\n{colon_hex(sct.signature)}",
    )


def decode_sct_list(
    parsed: Optional[x509.ExtensionType],
) -> Tuple[SignedCertificateTimestamp, ...]:
    """
    Describe the SCTs of a library-decoded CT extension value.

    Args:
        parsed: Extension value from `cert.extensions`, or None when the
            library could not decode the extension list

    Returns:
        Tuple of SCTs in list order; empty for the precertificate
        poison or a list the library did not decode
    """
    if not isinstance(parsed, SCT_LIST_TYPES):
        if parsed is not None:
            logger.debug(f"No SCTs in {type(parsed).__name__} extension value")
        return ()
    return tuple(describe_sct(sct) for sct in parsed)
