"""
PEM boundary checks and bundle splitting.
"""

import re
from typing import List

BEGIN_MARKER = "-----BEGIN CERTIFICATE-----"
END_MARKER = "-----END CERTIFICATE-----"

_BLOCK_PATTERN = re.compile(
    re.escape(BEGIN_MARKER) + r".*?" + re.escape(END_MARKER), re.DOTALL
)


def validate_certificate_format(cert_text: str) -> bool:
    """
    Check that text is wrapped in certificate PEM markers.

    This is a cheap pre-check only; nothing is decoded.

    Args:
        cert_text: Raw text as supplied by the user

    Returns:
        True if the trimmed text starts with the BEGIN marker and
        ends with the END marker
    """
    trimmed = cert_text.strip()
    return trimmed.startswith(BEGIN_MARKER) and trimmed.endswith(END_MARKER)


def split_certificates(text: str) -> List[str]:
    """Return every certificate PEM block found in text, in order."""
    return [match.group(0) for match in _BLOCK_PATTERN.finditer(text)]


def text_outside_certificates(text: str) -> str:
    """Return what remains of text once every PEM block is removed, trimmed."""
    return _BLOCK_PATTERN.sub("", text).strip()
