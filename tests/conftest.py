"""
Shared fixtures: certificate builders and SCT encoders.
"""

import datetime

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import NameOID

NOW = datetime.datetime(2025, 6, 1, 12, 0, 0, tzinfo=datetime.timezone.utc)


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def ec_key():
    return ec.generate_private_key(ec.SECP256R1())


def default_name(common_name: str = "test.example.com") -> x509.Name:
    return x509.Name(
        [
            x509.NameAttribute(NameOID.COUNTRY_NAME, "US"),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Test Org"),
            x509.NameAttribute(NameOID.COMMON_NAME, common_name),
        ]
    )


def build_certificate(
    private_key,
    subject=None,
    issuer=None,
    serial_number=0x1A2B3C,
    not_before=None,
    not_after=None,
    extensions=(),
    algorithm=hashes.SHA256(),
    public_key=None,
) -> str:
    """
    Build and sign a certificate, returning PEM text.

    Args:
        private_key: Signing key (also the subject key unless public_key given)
        extensions: Iterable of (ExtensionType, critical) pairs
    """
    subject = subject or default_name()
    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer or subject)
        .public_key(public_key or private_key.public_key())
        .serial_number(serial_number)
        .not_valid_before(not_before or NOW - datetime.timedelta(days=30))
        .not_valid_after(not_after or NOW + datetime.timedelta(days=365))
    )
    for extension, critical in extensions:
        builder = builder.add_extension(extension, critical=critical)

    cert = builder.sign(private_key, algorithm)
    return cert.public_bytes(serialization.Encoding.PEM).decode("ascii")


@pytest.fixture
def make_cert(rsa_key):
    """Factory building RSA-signed PEM certificates."""

    def _make(**kwargs):
        key = kwargs.pop("private_key", rsa_key)
        return build_certificate(key, **kwargs)

    return _make


def encode_sct(
    log_id: bytes = b"\xa2" * 32,
    timestamp_ms: int = 1706075169505,
    signature: bytes = b"\x30\x06\x02\x01\x01\x02\x01\x02",
    extensions: bytes = b"",
    version: int = 0,
    hash_alg: int = 4,
    sig_alg: int = 3,
) -> bytes:
    """Encode one length-prefixed SCT."""
    body = (
        bytes([version])
        + log_id
        + timestamp_ms.to_bytes(8, "big")
        + len(extensions).to_bytes(2, "big")
        + extensions
        + bytes([hash_alg, sig_alg])
        + len(signature).to_bytes(2, "big")
        + signature
    )
    return len(body).to_bytes(2, "big") + body


def encode_sct_list(*scts: bytes) -> bytes:
    inner = b"".join(scts)
    return len(inner).to_bytes(2, "big") + inner


def der_wrap(tag: int, data: bytes) -> bytes:
    """Prefix data with a DER tag and definite length."""
    length = len(data)
    if length < 0x80:
        header = bytes([length])
    elif length < 0x100:
        header = bytes([0x81, length])
    else:
        header = bytes([0x82]) + length.to_bytes(2, "big")
    return bytes([tag]) + header + data


def der_octet_string(data: bytes) -> bytes:
    """Wrap data in a DER OCTET STRING."""
    return der_wrap(0x04, data)
