"""
PEM to certificate decoding.

The certificate itself is parsed by `cryptography`. The to-be-signed
portion is also decoded with pyasn1 against the RFC 5280 schema to
recover fields the library normalises away: whether the version field
is present at all, the serial INTEGER octets, and each extension's
undecoded extnValue.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from pyasn1.codec.der import decoder as der_decoder
from pyasn1.error import PyAsn1Error
from pyasn1.type import namedtype, tag, univ
from pyasn1_modules import rfc5280

from .errors import DecodeError, classify_decode_error

logger = logging.getLogger(__name__)


class TBSCertificate(univ.Sequence):
    """
    RFC 5280 TBSCertificate with `version` optional instead of defaulted.

    With the stock schema an absent version decodes as v1 and cannot be
    told apart from an explicit v1.
    """

    componentType = namedtype.NamedTypes(
        namedtype.OptionalNamedType(
            "version",
            rfc5280.Version().subtype(
                explicitTag=tag.Tag(tag.tagClassContext, tag.tagFormatSimple, 0)
            ),
        ),
        namedtype.NamedType("serialNumber", rfc5280.CertificateSerialNumber()),
        namedtype.NamedType("signature", rfc5280.AlgorithmIdentifier()),
        namedtype.NamedType("issuer", rfc5280.Name()),
        namedtype.NamedType("validity", rfc5280.Validity()),
        namedtype.NamedType("subject", rfc5280.Name()),
        namedtype.NamedType("subjectPublicKeyInfo", rfc5280.SubjectPublicKeyInfo()),
        namedtype.OptionalNamedType(
            "issuerUniqueID",
            rfc5280.UniqueIdentifier().subtype(
                implicitTag=tag.Tag(tag.tagClassContext, tag.tagFormatSimple, 1)
            ),
        ),
        namedtype.OptionalNamedType(
            "subjectUniqueID",
            rfc5280.UniqueIdentifier().subtype(
                implicitTag=tag.Tag(tag.tagClassContext, tag.tagFormatSimple, 2)
            ),
        ),
        namedtype.OptionalNamedType(
            "extensions",
            rfc5280.Extensions().subtype(
                explicitTag=tag.Tag(tag.tagClassContext, tag.tagFormatSimple, 3)
            ),
        ),
    )


@dataclass(frozen=True)
class RawExtension:
    """An extension as it appears in the certificate, undecoded."""

    oid: str
    critical: bool
    value: bytes


@dataclass(frozen=True)
class TbsLayout:
    raw_version: Optional[int]
    serial_bytes: bytes
    extensions: Tuple[RawExtension, ...]


@dataclass(frozen=True)
class DecodedCertificate:
    """A parsed certificate plus the raw fields of its TBSCertificate."""

    certificate: x509.Certificate
    layout: TbsLayout


def decode_der(data: bytes, schema):
    """
    Decode DER data that must consist of exactly one value of `schema`.

    Raises:
        PyAsn1Error: The data does not match the schema or has trailing bytes
    """
    value, rest = der_decoder.decode(data, asn1Spec=schema)
    if rest:
        raise PyAsn1Error(f"{len(rest)} trailing bytes after {schema.__class__.__name__}")
    return value


def integer_octets(value: int) -> bytes:
    """Minimal two's complement octets, as in a DER INTEGER."""
    magnitude = value if value >= 0 else ~value
    return value.to_bytes(magnitude.bit_length() // 8 + 1, "big", signed=True)


def walk_tbs(tbs_bytes: bytes) -> TbsLayout:
    """
    Decode a TBSCertificate and pull out version, serial and extensions.

    Raises:
        PyAsn1Error: The structure does not match the RFC 5280 schema
    """
    tbs = decode_der(tbs_bytes, TBSCertificate())

    version = tbs["version"]
    raw_version = int(version) if version.isValue else None

    extensions = []
    if tbs["extensions"].isValue:
        for ext in tbs["extensions"]:
            extensions.append(
                RawExtension(
                    oid=str(ext["extnID"]),
                    critical=bool(ext["critical"]),
                    value=ext["extnValue"].asOctets(),
                )
            )

    return TbsLayout(
        raw_version=raw_version,
        serial_bytes=integer_octets(int(tbs["serialNumber"])),
        extensions=tuple(extensions),
    )


def decode_certificate(cert_text: str) -> DecodedCertificate:
    """
    Decode PEM text into a certificate.

    Args:
        cert_text: PEM text with certificate boundary markers

    Returns:
        DecodedCertificate

    Raises:
        DecodeError: Body is not valid base64/DER, is not a certificate,
            or carries an unsupported public key type
    """
    try:
        cert = x509.load_pem_x509_certificate(cert_text.strip().encode("ascii"))
        # Surface unsupported key types here rather than mid-extraction
        cert.public_key()
        layout = walk_tbs(cert.tbs_certificate_bytes)
    except (ValueError, UnsupportedAlgorithm, x509.InvalidVersion, PyAsn1Error) as e:
        code, details = classify_decode_error(e)
        logger.debug(f"Certificate decoding failed ({code.value}): {e}")
        raise DecodeError(
            f"Failed to parse certificate: {e}",
            error_code=code,
            error_details=details,
        ) from e

    return DecodedCertificate(certificate=cert, layout=layout)
