"""
Output formatting: JSON export, text report and raw PEM view.
"""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from . import __version__
from .models import CertificateInfo
from .pem import BEGIN_MARKER, END_MARKER
from .search import readable_extension_name


class OutputFormatter:
    """
    Handles formatting and exporting parse results.

    JSON follows the camelCase shape of CertificateInfo.to_dict(); the
    text report is laid out like `openssl x509 -text`.
    """

    def __init__(self, output_path: Optional[str] = None):
        """
        Initialize output formatter.

        Args:
            output_path: Path to output file; None writes to stdout
        """
        self.output_path = Path(output_path) if output_path else None

    @staticmethod
    def create_output(
        certificates: List[CertificateInfo],
        evaluated_at: datetime,
        search: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """
        Create structured output dictionary.

        Args:
            certificates: Parsed certificates, in input order
            evaluated_at: Instant used for validity status
            search: Optional search results per certificate

        Returns:
            Complete output structure
        """
        output: Dict[str, Any] = {
            "metadata": {
                "version": __version__,
                "generated_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
                "evaluated_at": evaluated_at.isoformat(),
                "count": len(certificates),
            },
            "certificates": [cert.to_dict() for cert in certificates],
        }
        if search is not None:
            output["search"] = search
        return output

    @staticmethod
    def render_text(info: CertificateInfo) -> str:
        """Render one certificate as an indented text report."""
        lines = [
            "Certificate:",
            "    Data:",
            f"        Version: {info.version} (0x{info.version - 1:x})",
            "        Serial Number:",
            f"            {info.serial_number}",
            f"        Signature Algorithm: {info.signature.algorithm}",
            f"        Issuer: {_format_name(info.issuer.to_dict())}",
            "        Validity",
            f"            Not Before: {_format_time(info.validity.not_before)}",
            f"            Not After : {_format_time(info.validity.not_after)}",
        ]
        status = _validity_status(info)
        if status:
            lines.append(f"            Status    : {status}")
        lines.append(f"        Subject: {_format_name(info.subject.to_dict())}")

        key = info.public_key
        lines.append("        Subject Public Key Info:")
        lines.append(f"            Public Key Algorithm: {key.algorithm.value}")
        if key.key_size is not None:
            lines.append(f"                Public-Key: ({key.key_size} bit)")
        if key.modulus is not None:
            lines.append("                Modulus:")
            lines.append(f"                    {key.modulus}")
        if key.exponent is not None:
            lines.append(f"                Exponent: {key.exponent}")
        if key.curve is not None:
            lines.append(f"                Curve: {key.curve}")

        if info.extensions:
            lines.append("        X509v3 extensions:")
            for ext in info.extensions:
                critical = " critical" if ext.critical else ""
                lines.append(f"            {readable_extension_name(ext.name)}:{critical}")
                lines.append(f"                {ext.value}")

        if info.basic_constraints is not None:
            bc = info.basic_constraints
            path = f", pathlen:{bc.path_length}" if bc.path_length is not None else ""
            lines.append(f"        Basic Constraints: CA:{str(bc.is_ca).upper()}{path}")
        if info.key_usage:
            lines.append(f"        Key Usage: {_join_flags(info.key_usage)}")
        if info.extended_key_usage:
            lines.append(f"        Extended Key Usage: {_join_flags(info.extended_key_usage)}")
        if info.certificate_transparency is not None:
            scts = info.certificate_transparency.scts
            lines.append(f"        Signed Certificate Timestamps: {len(scts)}")
            for sct in scts:
                algorithm = sct.signature.split("\n", 1)[0]
                lines.append(f"            Version   : {sct.version}")
                lines.append(f"            Log ID    : {sct.log_id}")
                lines.append(f"            Timestamp : {_format_time(sct.timestamp)}")
                lines.append(f"            Signature : {algorithm}")

        lines.append(f"    Signature Algorithm: {info.signature.algorithm}")
        lines.append(f"    Signature Value: {info.signature.value}")
        lines.append("    Fingerprints:")
        lines.append(f"        SHA-1  : {info.fingerprint.sha1}")
        lines.append(f"        SHA-256: {info.fingerprint.sha256}")
        return "\n".join(lines)

    @staticmethod
    def raw_view(cert_text: str) -> Dict[str, Any]:
        """
        Summarise the original PEM text for the raw view.

        Returns:
            Dictionary with the trimmed text, base64 line count and
            character counts
        """
        trimmed = cert_text.strip()
        body = [
            line.strip()
            for line in trimmed.splitlines()
            if line.strip() and line.strip() not in (BEGIN_MARKER, END_MARKER)
        ]
        return {
            "text": trimmed,
            "lines": len(trimmed.splitlines()),
            "base64_lines": len(body),
            "base64_length": sum(len(line) for line in body),
            "characters": len(trimmed),
        }

    def write_json(self, data: Dict[str, Any]) -> None:
        """
        Write data to the output file atomically, or to stdout.

        Args:
            data: Data to write
        """
        if self.output_path is None:
            self.write_stdout(data)
            return

        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.output_path.with_suffix(".tmp")

        try:
            with open(temp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_path.replace(self.output_path)
        except OSError as e:
            if temp_path.exists():
                temp_path.unlink()
            raise IOError(f"Failed to write output file: {e}") from e

    def write_text(self, text: str) -> None:
        if self.output_path is None:
            print(text)
            return
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self.output_path.write_text(text + "\n", encoding="utf-8")

    @staticmethod
    def write_stdout(data: Dict[str, Any]) -> None:
        print(json.dumps(data, indent=2, ensure_ascii=False))


def _format_name(name: Dict[str, str]) -> str:
    labels = {
        "country": "C",
        "state": "ST",
        "locality": "L",
        "organization": "O",
        "organizationalUnit": "OU",
        "commonName": "CN",
        "email": "emailAddress",
    }
    return ", ".join(f"{labels[key]}={name[key]}" for key in labels if key in name)


def _format_time(value: datetime) -> str:
    return value.strftime("%b %d %H:%M:%S %Y GMT")


def _join_flags(values) -> str:
    # Drop the diagnostic echo lines from the summary
    prefixes = ("Raw Binary:", "Hex:", "Binary:")
    return ", ".join(v for v in values if not v.startswith(prefixes))


def _validity_status(info: CertificateInfo) -> str:
    if info.validity.is_expired:
        return "Expired"
    if info.validity.is_expiring_soon:
        return "Expiring soon"
    return ""
