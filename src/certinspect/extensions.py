"""
Extension interpretation.

Every extension gets a generic display entry. Key Usage, Basic
Constraints and Extended Key Usage additionally get dedicated decoders
that decode the raw extnValue with pyasn1 against the RFC 5280
schema. A decoder that meets malformed input degrades to a documented
fallback value so one bad extension never aborts the whole parse.
"""

import logging
from enum import Enum
from typing import Dict, Iterable, Optional, Tuple

from cryptography import x509
from cryptography.x509.certificate_transparency import SignedCertificateTimestamp
from cryptography.x509.oid import AuthorityInformationAccessOID
from pyasn1.error import PyAsn1Error
from pyasn1_modules import rfc5280

from .decoder import RawExtension, decode_der
from .formatting import colon_hex, echo_lines, raw_echo
from .models import BasicConstraintsInfo, ExtensionInfo

logger = logging.getLogger(__name__)


class ExtensionKind(str, Enum):
    """Extensions identified by OID."""

    SUBJECT_KEY_IDENTIFIER = "2.5.29.14"
    KEY_USAGE = "2.5.29.15"
    SUBJECT_ALT_NAME = "2.5.29.17"
    ISSUER_ALT_NAME = "2.5.29.18"
    BASIC_CONSTRAINTS = "2.5.29.19"
    NAME_CONSTRAINTS = "2.5.29.30"
    CRL_DISTRIBUTION_POINTS = "2.5.29.31"
    CERTIFICATE_POLICIES = "2.5.29.32"
    AUTHORITY_KEY_IDENTIFIER = "2.5.29.35"
    EXTENDED_KEY_USAGE = "2.5.29.37"
    AUTHORITY_INFO_ACCESS = "1.3.6.1.5.5.7.1.1"
    TLS_FEATURE = "1.3.6.1.5.5.7.1.24"
    SCT_LIST = "1.3.6.1.4.1.11129.2.4.2"
    PRECERT_POISON = "1.3.6.1.4.1.11129.2.4.3"
    OCSP_SCT_LIST = "1.3.6.1.4.1.11129.2.4.5"

    @classmethod
    def from_oid(cls, oid: str) -> Optional["ExtensionKind"]:
        try:
            return cls(oid)
        except ValueError:
            return None

    @property
    def is_certificate_transparency(self) -> bool:
        return self in (
            ExtensionKind.SCT_LIST,
            ExtensionKind.PRECERT_POISON,
            ExtensionKind.OCSP_SCT_LIST,
        )


EXTENSION_NAMES: Dict[ExtensionKind, str] = {
    ExtensionKind.SUBJECT_KEY_IDENTIFIER: "subjectKeyIdentifier",
    ExtensionKind.KEY_USAGE: "keyUsage",
    ExtensionKind.SUBJECT_ALT_NAME: "subjectAltName",
    ExtensionKind.ISSUER_ALT_NAME: "issuerAltName",
    ExtensionKind.BASIC_CONSTRAINTS: "basicConstraints",
    ExtensionKind.NAME_CONSTRAINTS: "nameConstraints",
    ExtensionKind.CRL_DISTRIBUTION_POINTS: "cRLDistributionPoints",
    ExtensionKind.CERTIFICATE_POLICIES: "certificatePolicies",
    ExtensionKind.AUTHORITY_KEY_IDENTIFIER: "authorityKeyIdentifier",
    ExtensionKind.EXTENDED_KEY_USAGE: "extKeyUsage",
    ExtensionKind.AUTHORITY_INFO_ACCESS: "authorityInfoAccess",
    ExtensionKind.TLS_FEATURE: "tlsFeature",
    ExtensionKind.SCT_LIST: "ctPrecertificateSCTs",
    ExtensionKind.PRECERT_POISON: "ctPrecertificatePoison",
    ExtensionKind.OCSP_SCT_LIST: "signedCertificateTimestampList",
}

# (camelCase flag, display name) in BIT STRING bit order
KEY_USAGE_BITS = (
    ("digitalSignature", "Digital Signature"),
    ("nonRepudiation", "Non Repudiation"),
    ("keyEncipherment", "Key Encipherment"),
    ("dataEncipherment", "Data Encipherment"),
    ("keyAgreement", "Key Agreement"),
    ("keyCertSign", "Key Cert Sign"),
    ("cRLSign", "CRL Sign"),
    ("encipherOnly", "Encipher Only"),
    ("decipherOnly", "Decipher Only"),
)

# Used when the Key Usage value is too short or malformed
FALLBACK_KEY_USAGE = frozenset({"digitalSignature", "keyEncipherment"})

EXTENDED_KEY_USAGE_NAMES = {
    "1.3.6.1.5.5.7.3.1": "TLS Web Server Authentication",
    "1.3.6.1.5.5.7.3.2": "TLS Web Client Authentication",
    "1.3.6.1.5.5.7.3.3": "Code Signing",
    "1.3.6.1.5.5.7.3.4": "E-mail Protection",
    "1.3.6.1.5.5.7.3.5": "IPSec End System",
    "1.3.6.1.5.5.7.3.6": "IPSec Tunnel",
    "1.3.6.1.5.5.7.3.7": "IPSec User",
    "1.3.6.1.5.5.7.3.8": "Time Stamping",
    "1.3.6.1.5.5.7.3.9": "OCSP Signing",
    "1.3.6.1.5.5.7.3.13": "EAP over PPP",
    "1.3.6.1.5.5.7.3.14": "EAP over Lan",
    "1.3.6.1.5.5.7.3.17": "IPSec Internet Key Exchange",
    "1.3.6.1.5.2.3.4": "Kerberos PKINIT Client Authentication",
    "1.3.6.1.5.2.3.5": "Kerberos PKINIT KDC",
    "1.3.6.1.4.1.311.20.2.2": "Microsoft Smartcard Login",
    "1.3.6.1.4.1.311.10.3.4": "Microsoft Encrypted File System",
    "1.3.6.1.4.1.11129.2.4.4": "CT Precertificate Signer",
    "2.5.29.37.0": "Any Extended Key Usage",
}

FALLBACK_EXTENDED_KEY_USAGE = (
    "TLS Web Server Authentication",
    "TLS Web Client Authentication",
)

_ACCESS_METHOD_NAMES = {
    AuthorityInformationAccessOID.OCSP: "OCSP",
    AuthorityInformationAccessOID.CA_ISSUERS: "CA Issuers",
}


def extension_name(oid: str) -> str:
    """Display name for an extension OID, or the dotted OID itself."""
    kind = ExtensionKind.from_oid(oid)
    if kind is None:
        return oid
    return EXTENSION_NAMES[kind]


def oid_name(oid: x509.ObjectIdentifier) -> str:
    # cryptography only exposes its OID names through _name
    name = oid._name
    if not name or name == "Unknown OID":
        return oid.dotted_string
    return name


def _render_general_name(name: x509.GeneralName) -> str:
    if isinstance(name, x509.DNSName):
        return f"DNS:{name.value}"
    if isinstance(name, x509.IPAddress):
        return f"IP Address:{name.value}"
    if isinstance(name, x509.RFC822Name):
        return f"email:{name.value}"
    if isinstance(name, x509.UniformResourceIdentifier):
        return f"URI:{name.value}"
    if isinstance(name, x509.DirectoryName):
        return f"DirName:{name.value.rfc4514_string()}"
    if isinstance(name, x509.RegisteredID):
        return f"Registered ID:{oid_name(name.value)}"
    if isinstance(name, x509.OtherName):
        return f"othername:{oid_name(name.type_id)}"
    return str(name)


def _render_item(item: object) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, x509.ObjectIdentifier):
        return oid_name(item)
    if isinstance(item, x509.GeneralName):
        return _render_general_name(item)
    if isinstance(item, x509.AccessDescription):
        method = _ACCESS_METHOD_NAMES.get(item.access_method, oid_name(item.access_method))
        return f"{method} - {_render_general_name(item.access_location)}"
    if isinstance(item, x509.DistributionPoint):
        if item.full_name:
            return ", ".join(_render_general_name(name) for name in item.full_name)
        return repr(item)
    if isinstance(item, x509.PolicyInformation):
        return f"Policy: {oid_name(item.policy_identifier)}"
    if isinstance(item, SignedCertificateTimestamp):
        return f"{colon_hex(item.log_id)} ({item.timestamp.isoformat()})"
    return str(item)


def render_extension_value(parsed: Optional[x509.ExtensionType], raw: bytes) -> str:
    """
    Render an extension value for display.

    Text is shown as-is, iterable values are joined, anything else gets
    a structured dump. Values the library could not decode are shown
    as colon separated hex of the raw bytes.
    """
    if parsed is None or isinstance(parsed, x509.UnrecognizedExtension):
        return colon_hex(raw)
    if isinstance(parsed, str):
        return parsed
    if isinstance(parsed, x509.SubjectKeyIdentifier):
        return colon_hex(parsed.digest)
    if isinstance(parsed, x509.AuthorityKeyIdentifier) and parsed.key_identifier:
        return f"keyid:{colon_hex(parsed.key_identifier)}"
    if isinstance(parsed, Iterable):
        return ", ".join(_render_item(item) for item in parsed)
    return repr(parsed)


def describe_extension(raw: RawExtension, parsed: Optional[x509.ExtensionType]) -> ExtensionInfo:
    """Build the generic display entry for one extension."""
    try:
        value = render_extension_value(parsed, raw.value)
    except ValueError as e:
        logger.debug(f"Rendering {raw.oid} failed, showing raw bytes: {e}")
        value = colon_hex(raw.value)
    return ExtensionInfo(
        name=extension_name(raw.oid),
        value=value,
        critical=raw.critical,
        oid=raw.oid,
    )


def parse_key_usage(raw: bytes) -> Dict[str, bool]:
    """
    Decode a Key Usage BIT STRING into named flags.

    Values shorter than 4 bytes yield the fallback flag set.

    Raises:
        PyAsn1Error: The value is not a well formed BIT STRING
    """
    if len(raw) < 4:
        return {flag: flag in FALLBACK_KEY_USAGE for flag, _ in KEY_USAGE_BITS}

    bits = decode_der(raw, rfc5280.KeyUsage())
    return {
        flag: index < len(bits) and bool(bits[index])
        for index, (flag, _) in enumerate(KEY_USAGE_BITS)
    }


def decode_key_usage(raw: bytes) -> Tuple[str, ...]:
    """Key Usage display list: set flags followed by the raw echo."""
    try:
        flags = parse_key_usage(raw)
    except PyAsn1Error as e:
        logger.debug(f"Malformed Key Usage, using fallback flags: {e}")
        flags = {flag: flag in FALLBACK_KEY_USAGE for flag, _ in KEY_USAGE_BITS}

    names = [display for flag, display in KEY_USAGE_BITS if flags.get(flag)]
    return tuple(names + echo_lines(raw))


def decode_basic_constraints(raw: bytes) -> BasicConstraintsInfo:
    """
    Decode Basic Constraints: SEQUENCE { cA BOOLEAN DEFAULT FALSE,
    pathLenConstraint INTEGER (0..MAX) OPTIONAL }.

    Malformed values are reported as an end-entity certificate with
    no path length. The raw echo is always attached.
    """
    echo = raw_echo(raw)
    try:
        constraints = decode_der(raw, rfc5280.BasicConstraints())
        is_ca = bool(constraints["cA"])
        path_length = constraints["pathLenConstraint"]
        path_length = int(path_length) if path_length.isValue else None
    except PyAsn1Error as e:
        logger.debug(f"Malformed Basic Constraints, reporting CA:FALSE: {e}")
        return BasicConstraintsInfo(is_ca=False, path_length=None, raw_data=echo)

    return BasicConstraintsInfo(is_ca=is_ca, path_length=path_length, raw_data=echo)


def parse_extended_key_usage(raw: bytes) -> Tuple[str, ...]:
    """
    Resolve each purpose OID in an Extended Key Usage value.

    Unknown purposes are reported as their dotted OID.

    Raises:
        PyAsn1Error: The value is not a SEQUENCE OF OBJECT IDENTIFIER
    """
    purposes = decode_der(raw, rfc5280.ExtKeyUsageSyntax())
    return tuple(
        EXTENDED_KEY_USAGE_NAMES.get(str(oid), str(oid)) for oid in purposes
    )


def decode_extended_key_usage(raw: bytes) -> Tuple[str, ...]:
    """Extended Key Usage display list: purposes followed by the raw echo."""
    try:
        purposes = parse_extended_key_usage(raw)
    except PyAsn1Error as e:
        logger.debug(f"Malformed Extended Key Usage, using fallback purposes: {e}")
        purposes = FALLBACK_EXTENDED_KEY_USAGE
    return tuple(purposes) + tuple(echo_lines(raw))


def find_extension(
    extensions: Iterable[RawExtension], kind: ExtensionKind
) -> Optional[RawExtension]:
    """Return the first extension of the given kind."""
    for ext in extensions:
        if ext.oid == kind.value:
            return ext
    return None
