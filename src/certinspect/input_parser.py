"""
Certificate input loading from files, stdin and pasted text.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional, TextIO

from .errors import FormatError
from .pem import split_certificates, text_outside_certificates

logger = logging.getLogger(__name__)


class InputParser:
    """
    Loads certificate text for the parser.

    Files must carry a .pem or .crt extension. Bundles holding several
    certificates are split into individual PEM blocks.
    """

    ALLOWED_SUFFIXES = (".pem", ".crt")

    @staticmethod
    def read_certificate_file(file_path: str) -> str:
        """
        Read certificate text from a file.

        Args:
            file_path: Path to a .pem or .crt file

        Returns:
            File contents

        Raises:
            FileNotFoundError: The file does not exist
            ValueError: The file extension is not supported
        """
        path = Path(file_path)

        if path.suffix.lower() not in InputParser.ALLOWED_SUFFIXES:
            raise ValueError("Please upload a .crt or .pem file")

        if not path.exists():
            raise FileNotFoundError(f"Certificate file not found: {file_path}")

        return path.read_text(encoding="utf-8", errors="replace")

    @staticmethod
    def read_stream(stream: Optional[TextIO] = None) -> str:
        """Read certificate text from a stream (stdin by default)."""
        return (stream or sys.stdin).read()

    @staticmethod
    def read_pasted_text(text: str) -> str:
        """
        Clean pasted certificate text.

        Raises:
            ValueError: Nothing but whitespace was pasted
        """
        cleaned = text.strip()
        if not cleaned:
            raise ValueError("Please enter certificate text")
        return cleaned

    @staticmethod
    def split_bundle(text: str) -> List[str]:
        """
        Split text into individual certificate PEM blocks.

        Text without any complete block is returned unchanged as a
        single entry so the parser can report the format error.

        Raises:
            FormatError: Non-whitespace text lies outside the blocks
        """
        blocks = split_certificates(text)
        if not blocks:
            return [text]
        stray = text_outside_certificates(text)
        if stray:
            raise FormatError(
                "Input contains text outside the certificate PEM blocks",
                error_details={"stray_text": stray[:64]},
            )
        if len(blocks) > 1:
            logger.info(f"Found {len(blocks)} certificates in input")
        return blocks

    @staticmethod
    def load(source: str, stream: Optional[TextIO] = None) -> List[str]:
        """
        Load certificates from a file path, or from stdin when source is "-".

        Returns:
            List of certificate PEM blocks
        """
        if source == "-":
            text = InputParser.read_stream(stream)
        else:
            text = InputParser.read_certificate_file(source)
        return InputParser.split_bundle(text)
