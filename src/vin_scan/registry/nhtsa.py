"""
NHTSA vPIC registry decoder.

API Documentation:
    https://vpic.nhtsa.dot.gov/api/

``GET {base}/vehicles/DecodeVin/{vin}?format=json`` answers with a
``Results`` list of ``{"Variable": ..., "Value": ...}`` rows. The decoder
maps the rows it knows onto NHTSADecodeResult and never raises: transport
and HTTP failures come back as error code "999".
"""

import logging
from typing import Any, Dict, Iterable, Optional
from urllib.parse import quote

import httpx

from ..config import RegistryConfig
from ..core.models import NHTSADecodeResult

logger = logging.getLogger(__name__)

NHTSA_API_BASE_URL = "https://vpic.nhtsa.dot.gov/api"

# vPIC variable name -> NHTSADecodeResult field (exact, case-sensitive)
NHTSA_FIELD_MAPPING: Dict[str, str] = {
    "Make": "make",
    "Model": "model",
    "Model Year": "model_year",
    "Vehicle Type": "vehicle_type",
    "Trim": "trim",
    "Engine Model": "engine_info",
    "Transmission Style": "transmission_info",
    "Drive Type": "drive_type",
    "Fuel Type - Primary": "fuel_type",
    "Plant Country": "plant_country",
    "Plant Company Name": "plant_company_name",
    "Plant State": "plant_state",
    "Plant City": "plant_city",
}

DECODE_FAILED_CODE = "999"
DECODE_FAILED_TEXT = "Failed to decode VIN"


class NHTSADecoder:
    """
    Client for the vPIC DecodeVin endpoint.

    The decoder owns its httpx.Client unless one is passed in; use it as a
    context manager or call close() when done.

    Usage:
        with NHTSADecoder() as decoder:
            result = decoder.decode_vin("1HGBH41JXMN109186")
            print(result.make, result.model, result.model_year)
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.Client] = None,
    ):
        """
        Args:
            base_url: API root (default: public vPIC API)
            timeout: Request timeout in seconds; None leaves the deadline to the caller
            client: Shared httpx.Client; its lifetime stays with the caller
        """
        self.base_url = (base_url or NHTSA_API_BASE_URL).rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    @classmethod
    def from_config(cls, config: RegistryConfig) -> "NHTSADecoder":
        return cls(base_url=config.base_url, timeout=config.timeout)

    def decode_url(self, vin: str) -> str:
        # The VIN is always a single path segment
        return f"{self.base_url}/vehicles/DecodeVin/{quote(vin, safe='')}"

    def decode_vin(self, vin: str) -> NHTSADecodeResult:
        """
        Decode a VIN via vPIC.

        Returns:
            NHTSADecodeResult; on any HTTP, transport or payload failure
            error_code is "999" and additional_error_text holds the cause
        """
        try:
            response = self._client.get(self.decode_url(vin), params={"format": "json"})
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            return self._failure(
                f"NHTSA API error: {status} {e.response.reason_phrase}", vin
            )
        except httpx.HTTPError as e:
            return self._failure(f"NHTSA request failed: {e}", vin)
        except ValueError as e:
            # Body was not JSON
            return self._failure(f"Invalid NHTSA response: {e}", vin)
        except Exception as e:
            logger.exception(f"Unexpected NHTSA decode failure for {vin}")
            return self._failure(f"NHTSA request failed: {e}", vin)

        if not isinstance(data, dict):
            return self._failure(f"Invalid NHTSA response: expected object, got {type(data).__name__}", vin)

        results = data.get("Results") or []
        if not isinstance(results, list):
            return self._failure("Invalid NHTSA response: Results is not a list", vin)

        decoded = parse_decode_results(results)
        if decoded.has_error:
            logger.warning(f"NHTSA decode for {vin} returned error code {decoded.error_code}: {decoded.error_text}")
        else:
            logger.info(f"NHTSA decoded {vin}: {decoded.model_year} {decoded.make} {decoded.model}")
        return decoded

    def _failure(self, message: str, vin: str) -> NHTSADecodeResult:
        logger.error(f"NHTSA decode error for {vin}: {message}")
        return NHTSADecodeResult(
            error_code=DECODE_FAILED_CODE,
            error_text=DECODE_FAILED_TEXT,
            additional_error_text=message,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "NHTSADecoder":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _clean_value(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_decode_results(rows: Iterable[Any]) -> NHTSADecodeResult:
    """
    Normalize vPIC ``{Variable, Value}`` rows into an NHTSADecodeResult.

    Unknown variables and malformed rows are ignored. A non-"0" Error Code
    is carried along with whatever fields were populated.
    """
    fields: Dict[str, Optional[str]] = {}
    by_variable: Dict[str, Optional[str]] = {}

    for row in rows:
        if not isinstance(row, dict):
            continue
        variable = row.get("Variable")
        if not isinstance(variable, str):
            continue
        value = _clean_value(row.get("Value"))
        by_variable.setdefault(variable, value)

        field_name = NHTSA_FIELD_MAPPING.get(variable)
        if field_name is not None:
            fields[field_name] = value

    error_code = by_variable.get("Error Code")
    if error_code is not None and error_code != "0":
        fields["error_code"] = error_code
        fields["error_text"] = by_variable.get("Error Text")
        fields["additional_error_text"] = by_variable.get("Additional Error Text")

    return NHTSADecodeResult(**fields)
