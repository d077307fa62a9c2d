"""
Console output with optional ANSI colors.
"""

import os
import sys
import threading
from typing import Optional, TextIO

from .models import CertificateInfo

RED = "31"
GREEN = "32"
YELLOW = "33"


class ConsoleOutput:
    """
    Status and error lines for the CLI.

    Status lines go to stdout, errors to stderr. Writes are serialised
    with a lock so lines from concurrent callers never interleave.
    """

    def __init__(self, quiet: bool = False, use_colors: bool = True):
        """
        Args:
            quiet: Only errors are printed
            use_colors: Color output when stdout is a capable terminal
        """
        self.quiet = quiet
        self.use_colors = use_colors and self._supports_color()
        self._lock = threading.Lock()

    @staticmethod
    def _supports_color() -> bool:
        isatty = getattr(sys.stdout, "isatty", None)
        if isatty is None or not isatty():
            return False
        return os.environ.get("TERM", "") not in ("", "dumb")

    def _colorize(self, text: str, color_code: Optional[str]) -> str:
        """Wrap text in an ANSI color sequence when colors are enabled."""
        if not self.use_colors or color_code is None:
            return text
        return f"\033[{color_code}m{text}\033[0m"

    def _emit(
        self,
        message: str,
        color_code: Optional[str] = None,
        stream: Optional[TextIO] = None,
        always: bool = False,
    ) -> None:
        if self.quiet and not always:
            return
        with self._lock:
            print(self._colorize(message, color_code), file=stream or sys.stdout)

    def success(self, message: str) -> None:
        self._emit(message, GREEN)

    def error(self, message: str) -> None:
        """Print an error to stderr. Errors ignore quiet mode."""
        self._emit(message, RED, stream=sys.stderr, always=True)

    def warning(self, message: str) -> None:
        self._emit(message, YELLOW)

    def info(self, message: str) -> None:
        self._emit(message)

    def print_validity_status(self, info: CertificateInfo, label: str = "") -> None:
        """
        Print a one-line validity status for a parsed certificate.

        Expired certificates are shown in red, certificates expiring
        soon in yellow, valid ones in green.
        """
        name = label or info.subject.common_name or info.fingerprint.sha256[:16]
        not_after = info.validity.not_after.isoformat()
        if info.validity.is_expired:
            self._emit(f"[{name}] Expired on {not_after}", RED)
        elif info.validity.is_expiring_soon:
            self.warning(f"[{name}] Expiring soon: valid until {not_after}")
        else:
            self.success(f"[{name}] Valid until {not_after}")
