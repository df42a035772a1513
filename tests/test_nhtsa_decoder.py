"""
Tests for the NHTSA vPIC decoder.

HTTP is served by httpx.MockTransport; nothing leaves the process.

Run with: pytest tests/test_nhtsa_decoder.py -v
"""

import httpx
import pytest

from vin_scan.config import RegistryConfig
from vin_scan.registry import NHTSADecoder, parse_decode_results

BASE_URL = "https://vpic.test/api"
VIN = "1HGBH41JXMN109186"


def _rows(**variables):
    return [{"Variable": name, "Value": value, "VariableId": i}
            for i, (name, value) in enumerate(variables.items())]


def _decoder(handler):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return NHTSADecoder(base_url=BASE_URL, client=client), client


HONDA_ROWS = [
    {"Variable": "Make", "Value": "HONDA"},
    {"Variable": "Model", "Value": "Civic"},
    {"Variable": "Model Year", "Value": "2021"},
    {"Variable": "Trim", "Value": "EX"},
    {"Variable": "Vehicle Type", "Value": "PASSENGER CAR"},
    {"Variable": "Fuel Type - Primary", "Value": "Gasoline"},
    {"Variable": "Plant Country", "Value": "UNITED STATES (USA)"},
    {"Variable": "Plant City", "Value": "GREENSBURG"},
    {"Variable": "Drive Type", "Value": ""},
    {"Variable": "Series", "Value": "ignored"},
    {"Variable": "Error Code", "Value": "0"},
    {"Variable": "Error Text", "Value": "0 - VIN decoded clean."},
]


# =============================================================================
# ROW PARSING
# =============================================================================

class TestParseDecodeResults:
    """Test parse_decode_results."""

    def test_clean_decode(self):
        result = parse_decode_results(HONDA_ROWS)

        assert result.make == "HONDA"
        assert result.model == "Civic"
        assert result.model_year == "2021"
        assert result.trim == "EX"
        assert result.vehicle_type == "PASSENGER CAR"
        assert result.fuel_type == "Gasoline"
        assert result.plant_country == "UNITED STATES (USA)"
        assert result.plant_city == "GREENSBURG"
        assert result.error_code is None
        assert result.error_text is None
        assert result.has_error is False

    def test_blank_values_are_unset(self):
        result = parse_decode_results(HONDA_ROWS)
        assert result.drive_type is None
        assert "drive_type" not in result.to_dict()

    def test_partial_decode_keeps_fields(self):
        rows = _rows(**{
            "Make": "FORD",
            "Model Year": "2013",
            "Error Code": "8",
            "Error Text": "8 - No detailed data available currently",
            "Additional Error Text": "Partial data",
        })
        result = parse_decode_results(rows)

        assert result.make == "FORD"
        assert result.model_year == "2013"
        assert result.error_code == "8"
        assert result.error_text.startswith("8 - ")
        assert result.additional_error_text == "Partial data"
        assert result.has_error is True

    def test_variable_names_are_case_sensitive(self):
        result = parse_decode_results([{"Variable": "make", "Value": "HONDA"}])
        assert result.make is None

    def test_malformed_rows_ignored(self):
        rows = ["junk", None, {"Value": "x"}, {"Variable": 7, "Value": "y"},
                {"Variable": "Make", "Value": " TOYOTA "}]
        assert parse_decode_results(rows).make == "TOYOTA"

    def test_empty(self):
        result = parse_decode_results([])
        assert result.to_dict() == {}


# =============================================================================
# HTTP
# =============================================================================

class TestNHTSADecoder:
    """Test NHTSADecoder.decode_vin over a mock transport."""

    def test_request_shape(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"Count": 0, "Results": []})

        decoder, _ = _decoder(handler)
        decoder.decode_vin(VIN)

        assert len(seen) == 1
        request = seen[0]
        assert request.method == "GET"
        assert request.url.host == "vpic.test"
        assert request.url.path == f"/api/vehicles/DecodeVin/{VIN}"
        assert request.url.params["format"] == "json"

    def test_decode_success(self):
        decoder, _ = _decoder(lambda request: httpx.Response(
            200, json={"Count": len(HONDA_ROWS), "Message": "Results returned successfully",
                       "Results": HONDA_ROWS}
        ))

        result = decoder.decode_vin(VIN)

        assert result.make == "HONDA"
        assert result.model_year == "2021"
        assert result.error_code is None

    def test_http_error_status(self):
        decoder, _ = _decoder(lambda request: httpx.Response(500, text="boom"))

        result = decoder.decode_vin(VIN)

        assert result.error_code == "999"
        assert result.error_text == "Failed to decode VIN"
        assert "500" in result.additional_error_text
        assert result.make is None

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        decoder, _ = _decoder(handler)
        result = decoder.decode_vin(VIN)

        assert result.error_code == "999"
        assert "connection refused" in result.additional_error_text

    def test_non_httpx_exception(self):
        def handler(request):
            raise ConnectionResetError("peer reset")

        decoder, _ = _decoder(handler)
        result = decoder.decode_vin(VIN)

        assert result.error_code == "999"
        assert result.error_text == "Failed to decode VIN"
        assert "peer reset" in result.additional_error_text

    def test_vin_escaped_in_path(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"Results": []})

        decoder, _ = _decoder(handler)

        assert decoder.decode_url("../x") == f"{BASE_URL}/vehicles/DecodeVin/..%2Fx"
        decoder.decode_vin("../x")
        assert seen[0].url.raw_path.startswith(b"/api/vehicles/DecodeVin/")

    def test_invalid_json(self):
        decoder, _ = _decoder(lambda request: httpx.Response(200, text="<html>maintenance</html>"))

        result = decoder.decode_vin(VIN)

        assert result.error_code == "999"
        assert result.additional_error_text.startswith("Invalid NHTSA response")

    @pytest.mark.parametrize("payload", [[1, 2, 3], {"Results": "nope"}])
    def test_unexpected_payload(self, payload):
        decoder, _ = _decoder(lambda request: httpx.Response(200, json=payload))

        result = decoder.decode_vin(VIN)

        assert result.error_code == "999"

    def test_missing_results_is_empty_decode(self):
        decoder, _ = _decoder(lambda request: httpx.Response(200, json={"Count": 0}))

        result = decoder.decode_vin(VIN)

        assert result.has_error is False
        assert result.make is None

    def test_injected_client_not_closed(self):
        decoder, client = _decoder(lambda request: httpx.Response(200, json={"Results": []}))

        with decoder:
            decoder.decode_vin(VIN)

        assert client.is_closed is False

    def test_owned_client_closed(self):
        decoder = NHTSADecoder(base_url=BASE_URL)
        decoder.close()
        assert decoder._client.is_closed is True

    def test_from_config(self):
        decoder = NHTSADecoder.from_config(RegistryConfig(base_url="https://example.test/api/", timeout=3.0))
        try:
            assert decoder.decode_url(VIN) == f"https://example.test/api/vehicles/DecodeVin/{VIN}"
        finally:
            decoder.close()

    def test_default_base_url(self):
        with NHTSADecoder() as decoder:
            assert decoder.decode_url(VIN).startswith("https://vpic.nhtsa.dot.gov/api/vehicles/DecodeVin/")
