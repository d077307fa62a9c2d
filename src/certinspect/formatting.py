"""
Display formatting for serial numbers, RSA parameters and raw bytes.

Output mirrors what `openssl x509 -text` prints so values can be
compared side by side.
"""

from .models import RawData

MODULUS_OCTETS_PER_LINE = 15
MODULUS_INDENT = " " * 20


def format_serial_number(serial: str) -> str:
    """
    Group a hex serial number into colon separated pairs.

    Existing colons are removed first so already formatted input
    normalizes to the same grouping.

    Examples:
        1A2B3C -> 1A:2B:3C
        1a:2b:3c -> 1a:2b:3c
    """
    clean = serial.replace(":", "")
    if not clean:
        return serial
    return ":".join(clean[i:i + 2] for i in range(0, len(clean), 2))


def format_exponent(exponent: int) -> str:
    """Format an RSA public exponent as `65537 (0x10001)`."""
    return f"{exponent} (0x{exponent:X})"


def format_modulus(modulus: int) -> str:
    """
    Format an RSA modulus as colon separated upper-case octets.

    Lines hold 15 octets; continuation lines carry a fixed indent.
    """
    hex_digits = f"{modulus:X}"
    if len(hex_digits) % 2:
        hex_digits = "0" + hex_digits

    octets = [hex_digits[i:i + 2] for i in range(0, len(hex_digits), 2)]
    lines = [
        ":".join(octets[i:i + MODULUS_OCTETS_PER_LINE])
        for i in range(0, len(octets), MODULUS_OCTETS_PER_LINE)
    ]
    return ("\n" + MODULUS_INDENT).join(lines)


def colon_hex(data: bytes) -> str:
    """Render bytes as upper-case hex pairs joined by colons."""
    return ":".join(f"{b:02X}" for b in data)


def binary_string(data: bytes) -> str:
    """Render bytes as space separated 8-bit groups."""
    return " ".join(f"{b:08b}" for b in data)


def raw_echo(data: bytes) -> RawData:
    """Build the diagnostic echo attached to decoded extensions."""
    return RawData(
        binary=data.decode("latin-1"),
        hex=colon_hex(data),
        binary_string=binary_string(data),
    )


def echo_lines(data: bytes) -> list:
    """Diagnostic echo as display lines, appended to flag lists."""
    echo = raw_echo(data)
    return [
        f"Raw Binary: {echo.binary}",
        f"Hex: {echo.hex}",
        f"Binary: {echo.binary_string}",
    ]
