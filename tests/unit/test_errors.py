"""
Unit tests for error classification.
"""

import binascii

from cryptography.exceptions import UnsupportedAlgorithm
from pyasn1.error import PyAsn1Error

from certinspect.errors import (
    CertificateError,
    DecodeError,
    ErrorCode,
    FormatError,
    MetadataLookupError,
    classify_decode_error,
)


class TestExceptionHierarchy:
    """Tests for exception types and defaults."""

    def test_default_codes(self):
        """Test each subclass carries its own default code."""
        assert FormatError("x").error_code == ErrorCode.PEM_MARKERS_MISSING
        assert DecodeError("x").error_code == ErrorCode.DER_MALFORMED
        assert MetadataLookupError("x").error_code == ErrorCode.LOOKUP_FAILED
        assert CertificateError("x").error_code == ErrorCode.UNKNOWN_ERROR

    def test_shared_base(self):
        """Test both parse failures can be caught through the base class."""
        assert isinstance(FormatError("x"), CertificateError)
        assert isinstance(DecodeError("x"), CertificateError)
        assert not isinstance(FormatError("x"), DecodeError)

    def test_str_is_message(self):
        """Test the string form is the message alone."""
        error = DecodeError("Failed to parse certificate: bad", error_details={"a": 1})

        assert str(error) == "Failed to parse certificate: bad"
        assert error.error_details == {"a": 1}


class TestClassifyDecodeError:
    """Tests for mapping library exceptions to codes."""

    def test_unsupported_algorithm(self):
        """Test unsupported key types."""
        code, details = classify_decode_error(UnsupportedAlgorithm("Unknown key type"))

        assert code == ErrorCode.UNSUPPORTED_KEY_TYPE
        assert details["exception_type"] == "UnsupportedAlgorithm"

    def test_asn1_error(self):
        """Test schema decoding failures."""
        code, details = classify_decode_error(PyAsn1Error("Short substrate on input"))

        assert code == ErrorCode.DER_MALFORMED
        assert details["exception_type"] == "PyAsn1Error"

    def test_asn1_error_wins_over_message_hints(self):
        """Test the exception type decides before the message text."""
        code, _ = classify_decode_error(PyAsn1Error("TBSCertificate has 2 trailing bytes"))

        assert code == ErrorCode.DER_MALFORMED

    def test_binascii_error(self):
        """Test base64 failures."""
        code, _ = classify_decode_error(binascii.Error("Incorrect padding"))

        assert code == ErrorCode.DER_MALFORMED

    def test_pem_load_failure(self):
        """Test PEM load messages."""
        code, details = classify_decode_error(ValueError("Unable to load PEM file."))

        assert code == ErrorCode.NOT_A_CERTIFICATE
        assert details["raw_message"] == "Unable to load PEM file."

    def test_generic_value_error(self):
        """Test other value errors count as malformed DER."""
        code, _ = classify_decode_error(ValueError("error parsing asn1 value"))

        assert code == ErrorCode.DER_MALFORMED

    def test_unknown(self):
        """Test unrelated exceptions."""
        code, _ = classify_decode_error(RuntimeError("boom"))

        assert code == ErrorCode.UNKNOWN_ERROR
