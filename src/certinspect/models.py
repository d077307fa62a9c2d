"""
Result types produced by the certificate parser.

All types are frozen and sequences are tuples, so a parsed result is
never mutated after construction. `to_dict()` gives the camelCase
JSON shape consumed by the presentation layer.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class KeyAlgorithm(str, Enum):
    """Public key families recognised by the descriptor builder."""

    RSA = "RSA"
    EC = "EC"
    DSA = "DSA"
    UNKNOWN = "Unknown"


@dataclass(frozen=True)
class NameInfo:
    """Recognised attributes of a distinguished name."""

    common_name: Optional[str] = None
    organization: Optional[str] = None
    organizational_unit: Optional[str] = None
    country: Optional[str] = None
    state: Optional[str] = None
    locality: Optional[str] = None
    email: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        keys = {
            "commonName": self.common_name,
            "organization": self.organization,
            "organizationalUnit": self.organizational_unit,
            "country": self.country,
            "state": self.state,
            "locality": self.locality,
            "email": self.email,
        }
        return {key: value for key, value in keys.items() if value is not None}


@dataclass(frozen=True)
class ValidityInfo:
    """Validity window and its status at the evaluation instant."""

    not_before: datetime
    not_after: datetime
    is_expired: bool
    is_expiring_soon: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "notBefore": self.not_before.isoformat(),
            "notAfter": self.not_after.isoformat(),
            "isExpired": self.is_expired,
            "isExpiringSoon": self.is_expiring_soon,
        }


@dataclass(frozen=True)
class PublicKeyInfo:
    algorithm: KeyAlgorithm
    key_size: Optional[int] = None
    modulus: Optional[str] = None
    exponent: Optional[str] = None
    curve: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"algorithm": self.algorithm.value}
        if self.key_size is not None:
            data["keySize"] = self.key_size
        if self.modulus is not None:
            data["modulus"] = self.modulus
        if self.exponent is not None:
            data["exponent"] = self.exponent
        if self.curve is not None:
            data["curve"] = self.curve
        return data


@dataclass(frozen=True)
class SignatureInfo:
    algorithm: str
    value: str

    def to_dict(self) -> Dict[str, str]:
        return {"algorithm": self.algorithm, "value": self.value}


@dataclass(frozen=True)
class ExtensionInfo:
    """One extension as shown in the generic extension list."""

    name: str
    value: str
    critical: bool
    oid: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "value": self.value,
            "critical": self.critical,
            "oid": self.oid,
        }


@dataclass(frozen=True)
class Fingerprint:
    sha1: str
    sha256: str

    def to_dict(self) -> Dict[str, str]:
        return {"sha1": self.sha1, "sha256": self.sha256}


@dataclass(frozen=True)
class RawData:
    """Diagnostic echo of undecoded extension bytes."""

    binary: str
    hex: str
    binary_string: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "binary": self.binary,
            "hex": self.hex,
            "binaryString": self.binary_string,
        }


@dataclass(frozen=True)
class BasicConstraintsInfo:
    is_ca: bool
    path_length: Optional[int] = None
    raw_data: Optional[RawData] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"isCA": self.is_ca}
        if self.path_length is not None:
            data["pathLength"] = self.path_length
        if self.raw_data is not None:
            data["rawData"] = self.raw_data.to_dict()
        return data


@dataclass(frozen=True)
class SignedCertificateTimestamp:
    """A decoded SCT from the Certificate Transparency list extension."""

    version: str
    log_id: str
    timestamp: datetime
    signature: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "version": self.version,
            "logId": self.log_id,
            "timestamp": self.timestamp.isoformat(),
            "signature": self.signature,
        }


@dataclass(frozen=True)
class CertificateTransparencyInfo:
    scts: Tuple[SignedCertificateTimestamp, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {"scts": [sct.to_dict() for sct in self.scts]}


@dataclass(frozen=True)
class CertificateInfo:
    """Structured description of one certificate."""

    version: int
    subject: NameInfo
    issuer: NameInfo
    validity: ValidityInfo
    serial_number: str
    public_key: PublicKeyInfo
    signature: SignatureInfo
    extensions: Tuple[ExtensionInfo, ...]
    fingerprint: Fingerprint
    key_usage: Optional[Tuple[str, ...]] = None
    extended_key_usage: Optional[Tuple[str, ...]] = None
    basic_constraints: Optional[BasicConstraintsInfo] = None
    certificate_transparency: Optional[CertificateTransparencyInfo] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serialisable dictionary."""
        data: Dict[str, Any] = {
            "version": self.version,
            "subject": self.subject.to_dict(),
            "issuer": self.issuer.to_dict(),
            "validity": self.validity.to_dict(),
            "serialNumber": self.serial_number,
            "publicKey": self.public_key.to_dict(),
            "signature": self.signature.to_dict(),
            "extensions": [ext.to_dict() for ext in self.extensions],
            "fingerprint": self.fingerprint.to_dict(),
        }
        if self.key_usage is not None:
            data["keyUsage"] = list(self.key_usage)
        if self.extended_key_usage is not None:
            data["extendedKeyUsage"] = list(self.extended_key_usage)
        if self.basic_constraints is not None:
            data["basicConstraints"] = self.basic_constraints.to_dict()
        if self.certificate_transparency is not None:
            data["certificateTransparency"] = self.certificate_transparency.to_dict()
        return data
