"""Tests for the command-line interface."""

import io
import json

import pytest
import yaml

from sdvalidator.cli import build_parser, main

from conftest import MICRODATA_HTML, PRODUCT_JSONLD_HTML


@pytest.fixture
def product_file(tmp_path):
    """HTML file with a valid JSON-LD product."""
    path = tmp_path / "product.html"
    path.write_text(PRODUCT_JSONLD_HTML, encoding="utf-8")
    return path


@pytest.fixture
def broken_file(tmp_path):
    """HTML file whose only structured data is invalid."""
    path = tmp_path / "broken.html"
    path.write_text(
        '<script type="application/ld+json">{"@type": "Product"}</script>', encoding="utf-8"
    )
    return path


class TestParser:
    """Test cases for argument parsing."""

    def test_validate_arguments(self):
        """Test validate options are parsed."""
        args = build_parser().parse_args([
            "--log-level", "DEBUG", "validate", "a.html", "b.html",
            "--output", "json", "--fail-on-error", "--base-url", "https://example.com/",
        ])

        assert args.command == "validate"
        assert args.paths == ["a.html", "b.html"]
        assert args.output == "json"
        assert args.fail_on_error
        assert args.base_url == "https://example.com/"

    def test_no_command_prints_help(self, capsys):
        """Test running without a command shows help and succeeds."""
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out


class TestValidateCommand:
    """Test cases for the validate command."""

    def test_text_output(self, product_file, capsys):
        """Test the text report names the score and types."""
        exit_code = main(["--log-level", "ERROR", "validate", str(product_file)])

        out = capsys.readouterr().out
        assert exit_code == 0
        assert "Score:" in out
        assert "Product (1)" in out

    def test_json_output(self, product_file, capsys):
        """Test JSON output is a list of per-document reports."""
        exit_code = main(["--log-level", "ERROR", "validate", str(product_file), "-o", "json"])

        results = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert results[0]["source"] == str(product_file)
        assert results[0]["report"]["validation"]["valid"] is True

    def test_json_output_file(self, product_file, tmp_path, capsys):
        """Test --output-file writes the JSON report."""
        output_file = tmp_path / "out.json"

        main(["--log-level", "ERROR", "validate", str(product_file), "-o", "json",
              "-f", str(output_file)])

        assert "Results written to" in capsys.readouterr().out
        assert json.loads(output_file.read_text())[0]["report"]["hasStructuredData"] is True

    def test_stdin(self, monkeypatch, capsys):
        """Test '-' reads the document from stdin."""
        monkeypatch.setattr("sys.stdin", io.StringIO(MICRODATA_HTML))

        exit_code = main(["--log-level", "ERROR", "validate", "-", "-o", "json"])

        results = json.loads(capsys.readouterr().out)
        assert exit_code == 0
        assert results[0]["report"]["formats"]["microdata"]["items"] == 1

    def test_fail_on_error(self, broken_file, product_file):
        """Test --fail-on-error turns invalid documents into exit code 1."""
        assert main(["--log-level", "ERROR", "validate", str(broken_file)]) == 0
        assert main(["--log-level", "ERROR", "validate", str(broken_file), "--fail-on-error"]) == 1
        assert main(["--log-level", "ERROR", "validate", str(product_file), "--fail-on-error"]) == 0

    def test_unreadable_file(self, tmp_path, capsys):
        """Test a missing file is reported with exit code 1."""
        exit_code = main(["--log-level", "ERROR", "validate", str(tmp_path / "missing.html")])

        assert exit_code == 1
        assert "Error:" in capsys.readouterr().err

    def test_empty_file(self, tmp_path, capsys):
        """Test an empty document is a markup error."""
        path = tmp_path / "empty.html"
        path.write_text("")

        assert main(["--log-level", "ERROR", "validate", str(path)]) == 1

    def test_bad_registry(self, product_file, tmp_path, capsys):
        """Test an invalid registry file exits with 1."""
        registry_file = tmp_path / "types.yaml"
        registry_file.write_text("types: [unclosed")

        exit_code = main(["--log-level", "ERROR", "validate", str(product_file),
                          "--registry", str(registry_file)])

        assert exit_code == 1
        assert "registry" in capsys.readouterr().err.lower()

    def test_thresholds_file(self, product_file, tmp_path, capsys):
        """Test thresholds are loaded from --thresholds."""
        thresholds_file = tmp_path / "thresholds.json"
        thresholds_file.write_text(json.dumps({"thresholds": {"max_recommendations": 1}}))

        main(["--log-level", "ERROR", "validate", str(product_file), "-o", "json",
              "--thresholds", str(thresholds_file)])

        results = json.loads(capsys.readouterr().out)
        assert len(results[0]["report"]["recommendations"]) == 1


class TestTypesCommand:
    """Test cases for the types command."""

    def test_lists_builtin_types(self, capsys, monkeypatch):
        """Test the built-in types are listed with required properties."""
        monkeypatch.setattr("sdvalidator.schema_registry.settings.REGISTRY_FILE", None)

        assert main(["--log-level", "ERROR", "types"]) == 0

        out = capsys.readouterr().out
        assert "Offer  (required: price, priceCurrency)" in out
        assert "LocalBusiness" in out and "extends Organization" in out

    def test_custom_registry(self, tmp_path, capsys):
        """Test a registry file adds types to the listing."""
        registry_file = tmp_path / "types.yaml"
        registry_file.write_text(yaml.safe_dump({"types": {"Widget": {"required": ["color"]}}}))

        assert main(["--log-level", "ERROR", "types", "--registry", str(registry_file)]) == 0

        out = capsys.readouterr().out
        assert "Widget  (required: color)" in out
        assert "Product" in out
