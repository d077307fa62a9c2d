"""
Unit tests for CLI module.
"""

import io
import json
from unittest.mock import AsyncMock, patch

import pytest

from certinspect.cli import (
    EXIT_ERROR,
    EXIT_INVALID_CERTIFICATE,
    EXIT_OK,
    create_parser,
    main,
    parse_instant,
    validate_args,
)
from certinspect.lookup import LookupResult


@pytest.fixture
def cert_file(tmp_path, make_cert):
    path = tmp_path / "server.pem"
    path.write_text(make_cert())
    return path


class TestArgumentParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        """Test default option values."""
        args = create_parser().parse_args(["server.pem"])

        assert args.input == "server.pem"
        assert args.format == "text"
        assert args.expiring_days == 30
        assert args.timeout == 15.0
        assert args.log_level == "warning"
        assert args.lookup is None

    def test_options(self):
        """Test parsing of all output options."""
        args = create_parser().parse_args(
            ["-", "--format", "json", "-o", "out.json", "--search", "ca", "--raw", "-q"]
        )

        assert args.input == "-"
        assert args.format == "json"
        assert args.output == "out.json"
        assert args.search == "ca"
        assert args.raw is True
        assert args.quiet is True


class TestValidateArgs:
    """Tests for argument validation."""

    def parse(self, *argv):
        return create_parser().parse_args(list(argv))

    def test_valid(self):
        """Test a valid combination."""
        assert validate_args(self.parse("server.pem")) is None
        assert validate_args(self.parse("--lookup", "example.com")) is None

    def test_no_input(self):
        """Test neither file nor lookup."""
        assert "Provide a certificate" in validate_args(self.parse())

    def test_input_and_lookup(self):
        """Test file and lookup together."""
        assert "cannot be combined" in validate_args(
            self.parse("server.pem", "--lookup", "example.com")
        )

    def test_negative_window(self):
        """Test a negative expiring window."""
        assert "expiring window" in validate_args(
            self.parse("server.pem", "--expiring-days", "-1")
        )

    def test_bad_timeout(self):
        """Test a non-positive timeout."""
        assert "timeout" in validate_args(self.parse("server.pem", "--timeout", "0"))

    def test_bad_timestamp(self):
        """Test an unparseable --at value."""
        assert "Invalid timestamp" in validate_args(self.parse("server.pem", "--at", "soon"))


class TestParseInstant:
    """Tests for timestamp parsing."""

    def test_zulu(self):
        """Test the Z suffix."""
        assert parse_instant("2025-01-01T00:00:00Z").utcoffset().total_seconds() == 0

    def test_naive(self):
        """Test naive values are taken as UTC."""
        assert parse_instant("2025-01-01T00:00:00").tzinfo is not None


class TestMain:
    """Tests for the main entry point."""

    def test_text_report(self, cert_file, capsys):
        """Test the default text report."""
        exit_code = main([str(cert_file), "--no-color"])

        out = capsys.readouterr().out
        assert exit_code == EXIT_OK
        assert out.startswith("Certificate:")
        assert "[test.example.com]" in out

    def test_json_stdout(self, cert_file, capsys):
        """Test JSON on stdout is not mixed with status lines."""
        exit_code = main([str(cert_file), "--format", "json", "--at", "2025-06-01T12:00:00Z"])

        data = json.loads(capsys.readouterr().out)
        assert exit_code == EXIT_OK
        assert data["metadata"]["count"] == 1
        assert data["metadata"]["evaluated_at"] == "2025-06-01T12:00:00+00:00"
        assert data["certificates"][0]["serialNumber"] == "1A:2B:3C"

    def test_json_file_with_search_and_raw(self, cert_file, tmp_path):
        """Test JSON file output with search and raw view."""
        output_file = tmp_path / "out.json"

        exit_code = main(
            [
                str(cert_file),
                "--format",
                "json",
                "-o",
                str(output_file),
                "--search",
                "example.com",
                "--raw",
                "-q",
            ]
        )

        data = json.loads(output_file.read_text())
        assert exit_code == EXIT_OK
        assert "subject" in data["search"][0]["sections"]
        assert data["raw"][0]["base64_lines"] > 0

    def test_stdin(self, make_cert, capsys, monkeypatch):
        """Test reading from stdin."""
        monkeypatch.setattr("sys.stdin", io.StringIO(make_cert()))

        exit_code = main(["-", "--format", "json"])

        assert exit_code == EXIT_OK
        assert json.loads(capsys.readouterr().out)["metadata"]["count"] == 1

    def test_missing_markers(self, tmp_path, capsys):
        """Test text without markers exits with the invalid certificate code."""
        path = tmp_path / "bad.pem"
        path.write_text("not a certificate")

        exit_code = main([str(path)])

        assert exit_code == EXIT_INVALID_CERTIFICATE
        assert "PEM_MARKERS_MISSING" in capsys.readouterr().err

    def test_trailing_garbage(self, tmp_path, make_cert, capsys):
        """Test text after the certificate block is rejected."""
        path = tmp_path / "server.pem"
        path.write_text(make_cert() + "\nTRAILING GARBAGE NOT A CERT\n")

        exit_code = main([str(path), "--format", "json"])

        captured = capsys.readouterr()
        assert exit_code == EXIT_INVALID_CERTIFICATE
        assert captured.out == ""
        assert "outside the certificate PEM blocks" in captured.err

    def test_undecodable_body(self, tmp_path):
        """Test a body that does not decode."""
        path = tmp_path / "bad.pem"
        path.write_text("-----BEGIN CERTIFICATE-----\nAAAA\n-----END CERTIFICATE-----\n")

        assert main([str(path)]) == EXIT_INVALID_CERTIFICATE

    def test_unsupported_suffix(self, tmp_path, capsys):
        """Test a file with an unsupported extension."""
        path = tmp_path / "server.txt"
        path.write_text("x")

        assert main([str(path)]) == EXIT_ERROR
        assert "Please upload a .crt or .pem file" in capsys.readouterr().err

    def test_invalid_args(self, capsys):
        """Test validation errors exit before any work."""
        assert main([]) == EXIT_ERROR
        assert "Error:" in capsys.readouterr().err

    def test_lookup(self, capsys):
        """Test the lookup command prints the metadata."""
        result = LookupResult(hostname="example.com", api_data={"valid": True})

        with patch(
            "certinspect.lookup.CertificateMetadataClient.lookup",
            new=AsyncMock(return_value=result),
        ):
            exit_code = main(["--lookup", "example.com"])

        data = json.loads(capsys.readouterr().out)
        assert exit_code == EXIT_OK
        assert data == {"hostname": "example.com", "apiData": {"valid": True}, "source": "url"}
