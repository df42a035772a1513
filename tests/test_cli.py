"""
Tests for the vin-scan command line.
"""

import json
from unittest.mock import MagicMock, patch

import pytest

from vin_scan import __version__
from vin_scan.cli import build_parser, main
from vin_scan.core.models import NHTSADecodeResult, VehicleInfo, VINExtractionResult

VIN = "1HGBH41JXMN109186"


def test_no_command_prints_help(capsys):
    assert main([]) == 0
    assert "usage: vin-scan" in capsys.readouterr().out


def test_version(capsys):
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--version"])
    assert __version__ in capsys.readouterr().out


class TestValidateCommand:
    """Test `vin-scan validate`."""

    def test_valid(self, capsys):
        assert main(["validate", VIN.lower()]) == 0
        out = capsys.readouterr().out
        assert f"VIN: {VIN}" in out
        assert "Check digit: X (expected X)" in out
        assert "Valid: True" in out

    def test_bad_check_digit(self, capsys):
        assert main(["validate", "1HGCM82633A123456"]) == 1
        out = capsys.readouterr().out
        assert "Check digit: 3 (expected 7)" in out
        assert "Valid: False" in out

    def test_invalid_characters(self, capsys):
        assert main(["validate", "1HGBH41JXMN1O9186"]) == 1
        assert "Invalid characters: O" in capsys.readouterr().out

    def test_json(self, capsys):
        assert main(["validate", VIN, "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["is_fully_valid"] is True


class TestDecodeCommand:
    """Test `vin-scan decode` with the registry patched out."""

    def _patched_decoder(self, result):
        decoder = MagicMock()
        decoder.__enter__.return_value = decoder
        decoder.decode_vin.return_value = result
        return patch("vin_scan.registry.nhtsa.NHTSADecoder.from_config", return_value=decoder)

    def test_decode(self, capsys):
        with self._patched_decoder(NHTSADecodeResult(make="HONDA", model_year="1991")) as from_config:
            assert main(["decode", f" {VIN.lower()} "]) == 0

        from_config.return_value.decode_vin.assert_called_once_with(VIN)
        out = capsys.readouterr().out
        assert "make: HONDA" in out
        assert "model_year: 1991" in out

    def test_decode_failure(self, capsys):
        failure = NHTSADecodeResult(error_code="999", error_text="Failed to decode VIN")
        with self._patched_decoder(failure):
            assert main(["decode", VIN, "--json"]) == 1

        assert json.loads(capsys.readouterr().out)["error_code"] == "999"


class TestScanCommand:
    """Test `vin-scan scan` with the service patched out."""

    def _patched_service(self):
        service = MagicMock()
        service.__enter__.return_value = service
        return service, patch(
            "vin_scan.pipeline.service.VINProcessingService.from_config", return_value=service
        )

    def test_missing_image(self, tmp_path, capsys):
        assert main(["scan", str(tmp_path / "absent.jpg")]) == 1
        assert "Image not found" in capsys.readouterr().err

    def test_scan_and_decode(self, tmp_path, capsys):
        image = tmp_path / "plate.jpg"
        image.write_bytes(b"jpeg-bytes")
        service, patcher = self._patched_service()
        service.process_vin_image.return_value = VehicleInfo(
            vin=VIN, is_valid=True, confidence=0.91, ocr_text=VIN,
            year=1991, make="HONDA", model="Civic",
        )

        with patcher as from_config:
            assert main(["scan", str(image), "--provider", "aws"]) == 0

        assert from_config.call_args.kwargs["provider_type"] == "aws"
        service.process_vin_image.assert_called_once_with(b"jpeg-bytes")
        out = capsys.readouterr().out
        assert f"VIN: {VIN}" in out
        assert "Vehicle: 1991 HONDA Civic" in out

    def test_scan_without_vin(self, tmp_path, capsys):
        image = tmp_path / "plate.jpg"
        image.write_bytes(b"jpeg-bytes")
        service, patcher = self._patched_service()
        service.process_vin_image.return_value = VehicleInfo(
            vin="", is_valid=False, confidence=0.3, ocr_text="SMUDGE",
            error="No valid VIN found in image",
        )

        with patcher:
            assert main(["scan", str(image)]) == 1

        out = capsys.readouterr().out
        assert "Error: No valid VIN found in image" in out
        assert "OCR text: SMUDGE" in out

    def test_no_decode_json(self, tmp_path, capsys):
        image = tmp_path / "plate.jpg"
        image.write_bytes(b"jpeg-bytes")
        service, patcher = self._patched_service()
        service.extract_vin_from_image.return_value = VINExtractionResult(
            vin=VIN, confidence=0.8, is_valid=True, extracted_text=VIN,
        )

        with patcher:
            assert main(["scan", str(image), "--no-decode", "--json"]) == 0

        service.process_vin_image.assert_not_called()
        assert json.loads(capsys.readouterr().out)["vin"] == VIN
