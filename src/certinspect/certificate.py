"""
X.509 certificate parsing and field normalisation.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import dsa, ec, rsa
from cryptography.x509.oid import NameOID

from . import extensions as ext_mod
from .decoder import TbsLayout, decode_certificate
from .errors import ErrorCode, FormatError
from .formatting import format_exponent, format_modulus, format_serial_number
from .models import (
    CertificateInfo,
    CertificateTransparencyInfo,
    Fingerprint,
    KeyAlgorithm,
    NameInfo,
    PublicKeyInfo,
    SignatureInfo,
    ValidityInfo,
)
from .pem import validate_certificate_format
from .sct import decode_sct_list

logger = logging.getLogger(__name__)

# Name attribute OID -> NameInfo field
NAME_ATTRIBUTES = {
    NameOID.COMMON_NAME: "common_name",
    NameOID.ORGANIZATION_NAME: "organization",
    NameOID.ORGANIZATIONAL_UNIT_NAME: "organizational_unit",
    NameOID.COUNTRY_NAME: "country",
    NameOID.STATE_OR_PROVINCE_NAME: "state",
    NameOID.LOCALITY_NAME: "locality",
    NameOID.EMAIL_ADDRESS: "email",
}


def compute_fingerprints(cert: x509.Certificate) -> Fingerprint:
    """SHA-1 and SHA-256 over the certificate's complete DER encoding."""
    return Fingerprint(
        sha1=cert.fingerprint(hashes.SHA1()).hex(),
        sha256=cert.fingerprint(hashes.SHA256()).hex(),
    )


class CertificateParser:
    """
    Parses PEM certificates into CertificateInfo results.

    Each call is independent: the parser holds configuration only,
    so one instance may be shared between threads.
    """

    DEFAULT_EXPIRING_SOON_DAYS = 30
    DEFAULT_MAX_INPUT_SIZE = 256 * 1024

    def __init__(
        self,
        expiring_soon_days: int = DEFAULT_EXPIRING_SOON_DAYS,
        max_input_size: int = DEFAULT_MAX_INPUT_SIZE,
    ):
        """
        Initialize the parser.

        Args:
            expiring_soon_days: Width of the "expiring soon" window
            max_input_size: Largest PEM text accepted, in characters
        """
        self.expiring_soon = timedelta(days=expiring_soon_days)
        self.max_input_size = max_input_size

    def parse_certificate(self, cert_text: str, now: Optional[datetime] = None) -> CertificateInfo:
        """
        Parse a PEM certificate.

        Args:
            cert_text: PEM text with certificate boundary markers
            now: Evaluation instant for validity status; the current
                time is used when omitted

        Returns:
            CertificateInfo

        Raises:
            FormatError: Boundary markers missing or input too large
            DecodeError: The body could not be decoded as a certificate
        """
        if len(cert_text) > self.max_input_size:
            raise FormatError(
                f"Certificate text is {len(cert_text)} characters, "
                f"limit is {self.max_input_size}",
                error_code=ErrorCode.INPUT_TOO_LARGE,
            )
        if not validate_certificate_format(cert_text):
            raise FormatError(
                "Invalid certificate format: expected -----BEGIN CERTIFICATE----- "
                "and -----END CERTIFICATE----- markers"
            )

        if now is None:
            now = datetime.now(timezone.utc)
        elif now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)

        decoded = decode_certificate(cert_text)
        cert = decoded.certificate
        layout = decoded.layout
        parsed = self._parsed_extensions(cert)

        info = CertificateInfo(
            version=self.map_version(layout.raw_version),
            subject=self.extract_name(cert.subject),
            issuer=self.extract_name(cert.issuer),
            validity=self.evaluate_validity(
                cert.not_valid_before_utc, cert.not_valid_after_utc, now
            ),
            serial_number=format_serial_number(layout.serial_bytes.hex().upper()),
            public_key=self.describe_public_key(cert.public_key()),
            signature=self.describe_signature(cert),
            extensions=tuple(self._extract_extensions(layout, parsed)),
            fingerprint=compute_fingerprints(cert),
            **self._interpret_extensions(layout, parsed),
        )
        logger.debug(
            f"Parsed certificate {info.fingerprint.sha256} "
            f"with {len(info.extensions)} extensions"
        )
        return info

    @staticmethod
    def map_version(raw_version: Optional[int]) -> int:
        """Map the 0-indexed version field to the displayed version."""
        if raw_version is None:
            return 3
        return raw_version + 1

    @staticmethod
    def extract_name(name: x509.Name) -> NameInfo:
        """
        Extract recognised attributes from a distinguished name.

        Repeated attributes are joined with ", ". Attribute types
        outside NAME_ATTRIBUTES are omitted.
        """
        values: Dict[str, List[str]] = {}
        for attr in name:
            field_name = NAME_ATTRIBUTES.get(attr.oid)
            if field_name is None:
                continue
            values.setdefault(field_name, []).append(str(attr.value))
        return NameInfo(**{key: ", ".join(parts) for key, parts in values.items()})

    def evaluate_validity(
        self, not_before: datetime, not_after: datetime, now: datetime
    ) -> ValidityInfo:
        """Evaluate expiry status of a validity window at instant `now`."""
        return ValidityInfo(
            not_before=not_before,
            not_after=not_after,
            is_expired=not_after < now,
            is_expiring_soon=now < not_after < now + self.expiring_soon,
        )

    @staticmethod
    def describe_public_key(public_key) -> PublicKeyInfo:
        """Classify the key and format RSA parameters."""
        if isinstance(public_key, rsa.RSAPublicKey):
            numbers = public_key.public_numbers()
            return PublicKeyInfo(
                algorithm=KeyAlgorithm.RSA,
                key_size=numbers.n.bit_length(),
                modulus=format_modulus(numbers.n),
                exponent=format_exponent(numbers.e),
            )
        if isinstance(public_key, ec.EllipticCurvePublicKey):
            return PublicKeyInfo(algorithm=KeyAlgorithm.EC, curve=public_key.curve.name)
        if isinstance(public_key, dsa.DSAPublicKey):
            return PublicKeyInfo(algorithm=KeyAlgorithm.DSA)
        return PublicKeyInfo(algorithm=KeyAlgorithm.UNKNOWN)

    @staticmethod
    def describe_signature(cert: x509.Certificate) -> SignatureInfo:
        """
        Signature algorithm and value.

        The algorithm is resolved from its OID only. An unregistered OID
        is shown in dotted form rather than guessed.
        """
        return SignatureInfo(
            algorithm=ext_mod.oid_name(cert.signature_algorithm_oid),
            value=cert.signature.hex(),
        )

    @staticmethod
    def _parsed_extensions(cert: x509.Certificate) -> Dict[str, x509.ExtensionType]:
        """Library-decoded extension values keyed by dotted OID."""
        try:
            return {ext.oid.dotted_string: ext.value for ext in cert.extensions}
        except (ValueError, x509.DuplicateExtension) as e:
            # The library rejects the whole list if any one entry is bad
            logger.debug(f"Extension list not decodable, rendering raw values: {e}")
            return {}

    @staticmethod
    def _extract_extensions(layout: TbsLayout, parsed: Dict[str, x509.ExtensionType]) -> List:
        return [
            ext_mod.describe_extension(raw, parsed.get(raw.oid))
            for raw in layout.extensions
        ]

    @staticmethod
    def _interpret_extensions(layout: TbsLayout, parsed: Dict[str, x509.ExtensionType]) -> Dict:
        """Run the dedicated extension decoders that apply."""
        kinds = ext_mod.ExtensionKind
        found: Dict = {}

        key_usage = ext_mod.find_extension(layout.extensions, kinds.KEY_USAGE)
        if key_usage is not None:
            found["key_usage"] = ext_mod.decode_key_usage(key_usage.value)

        basic_constraints = ext_mod.find_extension(layout.extensions, kinds.BASIC_CONSTRAINTS)
        if basic_constraints is not None:
            found["basic_constraints"] = ext_mod.decode_basic_constraints(basic_constraints.value)

        eku = ext_mod.find_extension(layout.extensions, kinds.EXTENDED_KEY_USAGE)
        if eku is not None:
            found["extended_key_usage"] = ext_mod.decode_extended_key_usage(eku.value)

        for raw in layout.extensions:
            kind = kinds.from_oid(raw.oid)
            if kind is not None and kind.is_certificate_transparency:
                found["certificate_transparency"] = CertificateTransparencyInfo(
                    scts=decode_sct_list(parsed.get(raw.oid))
                )
                break

        return found


def parse_certificate(cert_text: str, now: Optional[datetime] = None) -> CertificateInfo:
    """Parse with default settings. See CertificateParser.parse_certificate."""
    return CertificateParser().parse_certificate(cert_text, now=now)
