"""
Unit tests for display formatting helpers.
"""

from certinspect.formatting import (
    binary_string,
    colon_hex,
    echo_lines,
    format_exponent,
    format_modulus,
    format_serial_number,
    raw_echo,
)


class TestSerialNumber:
    """Tests for serial number grouping."""

    def test_grouping(self):
        """Test hex digits are grouped in pairs."""
        assert format_serial_number("1A2B3C") == "1A:2B:3C"

    def test_already_formatted(self):
        """Test formatted input is normalised to the same grouping."""
        assert format_serial_number("1A:2B:3C") == "1A:2B:3C"
        assert format_serial_number("1A2B:3C") == "1A:2B:3C"

    def test_odd_length(self):
        """Test the last group may be a single digit."""
        assert format_serial_number("ABC") == "AB:C"

    def test_empty(self):
        """Test empty input is returned unchanged."""
        assert format_serial_number("") == ""


class TestRsaFormatting:
    """Tests for exponent and modulus formatting."""

    def test_exponent(self):
        """Test decimal and hex forms of the exponent."""
        assert format_exponent(65537) == "65537 (0x10001)"
        assert format_exponent(3) == "3 (0x3)"

    def test_short_modulus(self):
        """Test a modulus that fits on one line."""
        assert format_modulus(0xABCDEF) == "AB:CD:EF"

    def test_odd_digit_modulus_padded(self):
        """Test an odd number of hex digits is left padded."""
        assert format_modulus(0xFFF) == "0F:FF"

    def test_modulus_wraps_after_15_octets(self):
        """Test continuation lines carry the fixed indent."""
        modulus = int("11" * 16, 16)

        text = format_modulus(modulus)

        first, second = text.split("\n")
        assert first == ":".join(["11"] * 15)
        assert second == " " * 20 + "11"


class TestRawEcho:
    """Tests for the raw byte echo."""

    def test_colon_hex(self):
        """Test upper-case colon separated hex."""
        assert colon_hex(b"\x03\x02\x05\xa0") == "03:02:05:A0"
        assert colon_hex(b"") == ""

    def test_binary_string(self):
        """Test 8-bit groups."""
        assert binary_string(b"\x05\xa0") == "00000101 10100000"

    def test_raw_echo(self):
        """Test all three renderings."""
        echo = raw_echo(b"\x30\x00")

        assert echo.binary == "0\x00"
        assert echo.hex == "30:00"
        assert echo.binary_string == "00110000 00000000"
        assert echo.to_dict()["binaryString"] == "00110000 00000000"

    def test_echo_lines(self):
        """Test the display lines appended to flag lists."""
        lines = echo_lines(b"\xff")

        assert lines == ["Raw Binary: \xff", "Hex: FF", "Binary: 11111111"]
