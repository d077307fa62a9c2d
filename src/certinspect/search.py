"""
Free-text search over parsed certificate fields.

Searches section labels and the structured values of a CertificateInfo;
nothing is re-parsed.
"""

from typing import Any, Dict, List, Tuple

from .models import CertificateInfo, ExtensionInfo

_NAME_LABELS = [
    "Common Name",
    "Organization",
    "Organizational Unit",
    "Country",
    "State",
    "Locality",
    "Email",
]

SECTION_LABELS: Dict[str, List[str]] = {
    "version": ["Version", "Certificate Version"],
    "subject": _NAME_LABELS + ["Subject"],
    "issuer": _NAME_LABELS + ["Issuer"],
    "validity": ["Valid From", "Valid To", "Validity Period", "Validity"],
    "publicKey": ["Algorithm", "Key Size", "Public Key"],
    "signature": ["Algorithm", "Serial Number", "Signature"],
    "fingerprints": ["SHA-1", "SHA-256", "Fingerprints"],
    "subjectAltName": ["Subject Alternative Name", "SAN", "Domains"],
    "keyUsage": ["Key Usage", "Usage"],
    "basicConstraints": ["Basic Constraints", "CA", "Path Length"],
    "extendedKeyUsage": ["Extended Key Usage", "Extended Usage"],
    "certificateTransparency": ["Certificate Transparency", "SCT", "CT"],
}

READABLE_EXTENSION_NAMES = {
    "authoritykeyidentifier": "Authority Key Identifier",
    "subjectkeyidentifier": "Subject Key Identifier",
    "subjectaltname": "Subject Alternative Name",
    "issueraltname": "Issuer Alternative Name",
    "keyusage": "Key Usage",
    "extkeyusage": "Extended Key Usage",
    "crldistributionpoints": "CRL Distribution Points",
    "certificatepolicies": "Certificate Policies",
    "authorityinfoaccess": "Authority Information Access",
    "basicconstraints": "Basic Constraints",
    "nameconstraints": "Name Constraints",
    "tlsfeature": "TLS Feature",
    "ctprecertificatescts": "CT Precertificate SCTs",
    "ctprecertificatepoison": "CT Precertificate Poison",
    "signedcertificatetimestamplist": "Signed Certificate Timestamp List",
}


def readable_extension_name(name: str) -> str:
    """Human readable form of an extension name; unknown names pass through."""
    return READABLE_EXTENSION_NAMES.get(name.lower(), name)


def _contains(data: Any, term: str) -> bool:
    """Case-insensitive recursive substring match over text and numbers."""
    if isinstance(data, bool):
        return False
    if isinstance(data, (str, int)):
        return term in str(data).lower()
    if isinstance(data, dict):
        return any(_contains(value, term) for value in data.values())
    if isinstance(data, (list, tuple)):
        return any(_contains(value, term) for value in data)
    return False


def _section_data(info: CertificateInfo) -> Dict[str, Any]:
    data = info.to_dict()
    san = [
        ext["value"] for ext in data["extensions"] if ext["name"] == "subjectAltName"
    ]
    return {
        "version": data["version"],
        "subject": data["subject"],
        "issuer": data["issuer"],
        "validity": data["validity"],
        "publicKey": data["publicKey"],
        "signature": {"serialNumber": data["serialNumber"], **data["signature"]},
        "fingerprints": data["fingerprint"],
        "subjectAltName": san,
        "keyUsage": data.get("keyUsage"),
        "basicConstraints": data.get("basicConstraints"),
        "extendedKeyUsage": data.get("extendedKeyUsage"),
        "certificateTransparency": data.get("certificateTransparency"),
    }


class CertificateSearch:
    """
    Matches a search term against certificate sections and extensions.

    An empty or whitespace-only term matches everything.
    """

    def __init__(self, term: str):
        self.term = term.strip().lower()

    @property
    def is_empty(self) -> bool:
        return not self.term

    def _matches_labels(self, labels: List[str]) -> bool:
        return any(self.term in label.lower() for label in labels)

    def matching_sections(self, info: CertificateInfo) -> List[str]:
        """
        Names of sections whose labels or values contain the term.

        Sections absent from the certificate (e.g. no Key Usage
        extension) are never returned.
        """
        sections = _section_data(info)
        present = [name for name, data in sections.items() if data not in (None, [])]
        if self.is_empty:
            return present
        return [
            name
            for name in present
            if self._matches_labels(SECTION_LABELS[name]) or _contains(sections[name], self.term)
        ]

    def filter_extensions(self, info: CertificateInfo) -> Tuple[ExtensionInfo, ...]:
        """Extensions whose name, readable name or value contain the term."""
        if self.is_empty:
            return info.extensions
        return tuple(
            ext
            for ext in info.extensions
            if self.term in ext.name.lower()
            or self.term in readable_extension_name(ext.name).lower()
            or self.term in ext.value.lower()
        )


def search_certificate(info: CertificateInfo, term: str) -> Dict[str, Any]:
    """
    Search a parsed certificate.

    Returns:
        Dictionary with matching section names and matching extensions
    """
    search = CertificateSearch(term)
    return {
        "term": term,
        "sections": search.matching_sections(info),
        "extensions": [ext.to_dict() for ext in search.filter_extensions(info)],
    }
