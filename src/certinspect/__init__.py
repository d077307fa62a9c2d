"""
certinspect - X.509 Certificate Inspection

Decodes PEM certificates into a structured, human-readable description
of identity, validity, key, signature, extensions and fingerprints.
"""

__version__ = "1.0.0"
__author__ = "certinspect Team"

__all__ = [
    "CertificateParser",
    "CertificateInfo",
    "parse_certificate",
    "validate_certificate_format",
    "CertificateError",
    "FormatError",
    "DecodeError",
    "InputParser",
    "OutputFormatter",
    "ConsoleOutput",
    "CertificateSearch",
    "CertificateMetadataClient",
]


def __getattr__(name: str):
    """Lazy import module attributes on first access."""
    if name in ("CertificateParser", "parse_certificate"):
        from . import certificate
        return getattr(certificate, name)
    elif name == "CertificateInfo":
        from .models import CertificateInfo
        return CertificateInfo
    elif name == "validate_certificate_format":
        from .pem import validate_certificate_format
        return validate_certificate_format
    elif name in ("CertificateError", "FormatError", "DecodeError"):
        from . import errors
        return getattr(errors, name)
    elif name == "InputParser":
        from .input_parser import InputParser
        return InputParser
    elif name == "OutputFormatter":
        from .output import OutputFormatter
        return OutputFormatter
    elif name == "ConsoleOutput":
        from .console import ConsoleOutput
        return ConsoleOutput
    elif name == "CertificateSearch":
        from .search import CertificateSearch
        return CertificateSearch
    elif name == "CertificateMetadataClient":
        from .lookup import CertificateMetadataClient
        return CertificateMetadataClient
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
