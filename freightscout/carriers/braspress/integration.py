"""
Braspress Freight Quotation Integration

This module implements the client for the Braspress quotation API
(``/v1/cotacao/calcular/{json|xml}``).

MODALITIES:
-----------
- R: Rodoviario (road)
- A: Aereo (air)

Key API notes:
1. Authentication is HTTP Basic with the customer's API user and password
2. One POST is needed per modality; the body is the same apart from ``modal``
3. ``peso``, ``volumes`` and ``cubagem`` are derived from the volumes added
   to the client and injected into the caller's shipment data
4. Homologation (staging) lives on a separate host

A client is meant for a single quotation session used from one flow; it keeps
the volumes it was given until ``clear_volumes`` is called.

Usage:
    client = BraspressClient("user", "secret")
    client.add_volume(5.5, {"comprimento": 0.67, "largura": 0.67, "altura": 0.46})
    result = client.request_quotation(shipment, "json", ["R", "A"])
"""

import base64
import json
import logging
import pprint
import xml.etree.ElementTree as ET
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import requests

from freightscout import settings
from freightscout.carriers.base.carrier import FreightCarrier

from .exceptions import (
    BraspressAPIError,
    BraspressConnectionError,
    BraspressValidationError,
)
from .manifest import CargoManifest, Volume
from .mappings import (
    API_CONFIG,
    CUBAGE_FIELD,
    DEFAULT_MODALITY,
    DEFAULT_RESPONSE_FORMAT,
    MODALITY_FIELD,
    RESPONSE_FORMATS,
    VOLUME_COUNT_FIELD,
    WEIGHT_FIELD,
    get_base_url,
    get_modality_label,
    get_quotation_url,
    is_modality_supported,
)

logger = logging.getLogger(__name__)


def log_request_details(logger, method: str, url: str, headers: Dict, data: Dict = None):
    """Log details of outgoing API requests."""
    logger.debug("\n" + "="*80 + f"\nOUTGOING REQUEST DETAILS:\n{'='*80}")
    logger.debug(f"Method: {method}")
    logger.debug(f"URL: {url}")

    masked_headers = headers.copy()
    if 'Authorization' in masked_headers:
        masked_headers['Authorization'] = '***MASKED***'

    logger.debug("\nHeaders:")
    logger.debug(pprint.pformat(masked_headers))

    if data:
        logger.debug("\nRequest Body:")
        logger.debug(pprint.pformat(data))


def log_response_details(logger, response):
    """Log details of API responses."""
    logger.debug("\n" + "="*80 + f"\nRESPONSE DETAILS:\n{'='*80}")
    logger.debug(f"Status Code: {response.status_code}")
    logger.debug(f"Reason: {response.reason}")

    body = response.text or ""
    logger.debug("\nResponse Body:")
    logger.debug(body[:1000] + '...' if len(body) > 1000 else body)
    logger.debug("="*80)


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return float(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def encode_request_body(body: Dict[str, Any]) -> bytes:
    """
    Serialize a request body to UTF-8 JSON. Decimals are sent as numbers.

    Raises:
        BraspressValidationError: If a value cannot be represented in JSON
    """
    try:
        return json.dumps(body, default=_json_default, allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise BraspressValidationError(f"Invalid shipment data: {e}") from e


def xml_to_dict(element: ET.Element) -> Any:
    """
    Convert an XML element into plain Python data.

    Leaf elements without attributes become their stripped text. Anything else
    becomes a dict: attributes under "@name", children keyed by tag (repeated
    tags collected into a list) and any own text under "#text".
    """
    children = list(element)
    text = (element.text or "").strip()
    if not children and not element.attrib:
        return text

    result: Dict[str, Any] = {f"@{name}": value for name, value in element.attrib.items()}
    if text:
        result["#text"] = text
    for child in children:
        value = xml_to_dict(child)
        if child.tag in result:
            if not isinstance(result[child.tag], list):
                result[child.tag] = [result[child.tag]]
            result[child.tag].append(value)
        else:
            result[child.tag] = value
    return result


class BraspressClient(FreightCarrier):
    """Client for Braspress freight quotations (road and air)."""

    def __init__(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        production: Optional[bool] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize the Braspress client.

        Args:
            username: API user; falls back to BRASPRESS_USERNAME
            password: API password; falls back to BRASPRESS_PASSWORD
            production: Use the production host (default) or homologation
            timeout: Request timeout in seconds; None keeps the transport default

        Raises:
            BraspressValidationError: If the username or password is empty or not a string
        """
        if production is None:
            production = settings.BRASPRESS_PRODUCTION
        super().__init__(name="braspress", base_url=get_base_url(production))

        self.username = self._validate_credential(
            settings.BRASPRESS_USERNAME if username is None else username, "username"
        )
        self._password = self._validate_credential(
            settings.BRASPRESS_PASSWORD if password is None else password, "password"
        )
        self.production = production
        self.timeout = settings.BRASPRESS_TIMEOUT if timeout is None else timeout

        token = base64.b64encode(f"{self.username}:{self._password}".encode("utf-8")).decode("ascii")
        self.authorization_header = f"Basic {token}"

        self.manifest = CargoManifest()
        self.logger = logger
        self.logger.debug(
            f"Initialized BraspressClient for {'production' if production else 'homologation'} ({self.base_url})"
        )

    @staticmethod
    def _validate_credential(value: Any, field: str) -> str:
        if not isinstance(value, str) or not value:
            raise BraspressValidationError(f"Invalid {field}.")
        return value

    # ------------------------------------------------------------------
    # Volumes
    # ------------------------------------------------------------------

    def add_volume(self, weight: Any, dimensions: Mapping[str, Any]) -> Volume:
        """
        Add one package to the quotation.

        Args:
            weight: Weight in kg
            dimensions: {"comprimento": .., "largura": .., "altura": ..} in meters

        Raises:
            BraspressValidationError: If the weight or dimensions are invalid
        """
        volume = self.manifest.add(weight, dimensions)
        self.logger.debug(f"Added volume #{self.manifest.count}: {volume}")
        return volume

    def clear_volumes(self) -> None:
        self.manifest.clear()

    @property
    def volumes(self) -> Tuple[Volume, ...]:
        return self.manifest.volumes

    @property
    def volume_count(self) -> int:
        return self.manifest.count

    @property
    def total_weight(self) -> float:
        return self.manifest.total_weight

    # ------------------------------------------------------------------
    # Quotation
    # ------------------------------------------------------------------

    def validate_modality(self, modality: Any) -> str:
        """
        Raises:
            BraspressValidationError: If the modality is not R or A
        """
        if not isinstance(modality, str) or not is_modality_supported(modality):
            raise BraspressValidationError(f"Invalid modality: {modality}.")
        return modality

    def validate_response_format(self, response_format: Any) -> str:
        if response_format not in RESPONSE_FORMATS:
            raise BraspressValidationError(
                f"Invalid response format: {response_format}. Expected one of {', '.join(RESPONSE_FORMATS)}."
            )
        return response_format

    def build_request_body(self, shipment_data: Mapping[str, Any], modality: str) -> Dict[str, Any]:
        """
        Build the JSON payload for one modality.

        The caller's shipment data is copied, never mutated; weight, count and
        cubage come from the volumes held right now.
        """
        body = dict(shipment_data)
        body[MODALITY_FIELD] = modality
        body[WEIGHT_FIELD] = self.manifest.total_weight
        body[VOLUME_COUNT_FIELD] = self.manifest.count
        body[CUBAGE_FIELD] = self.manifest.cubage()
        return body

    def request_quotation(
        self,
        shipment_data: Mapping[str, Any],
        response_format: str = DEFAULT_RESPONSE_FORMAT,
        modalities: Union[str, List[str]] = DEFAULT_MODALITY,
    ) -> Dict[str, Any]:
        """
        Request quotations from Braspress, one call per modality.

        Args:
            shipment_data: Shipment fields sent as-is (cnpjRemetente, cnpjDestinatario,
                tipoFrete, cepOrigem, cepDestino, vlrMercadoria, ...)
            response_format: "json" or "xml"
            modalities: "R", "A" or an ordered list of them. Repeated tags are
                requested again and the later result wins.

        Returns:
            Mapping of "Rodoviario" / "Aereo" to the parsed response

        Raises:
            BraspressValidationError: Bad arguments or no volumes; nothing is sent
            BraspressConnectionError: Braspress unreachable or response unreadable
            BraspressAPIError: Braspress answered with a non-200 status
        """
        if not isinstance(shipment_data, Mapping):
            raise BraspressValidationError("Invalid shipment data: expected a mapping")
        response_format = self.validate_response_format(response_format)

        if isinstance(modalities, str):
            modality_list = [modalities]
        elif isinstance(modalities, (list, tuple)):
            modality_list = list(modalities)
        else:
            raise BraspressValidationError(f"Invalid modality: {modalities}.")
        if not modality_list:
            raise BraspressValidationError("No modality requested.")
        for modality in modality_list:
            self.validate_modality(modality)

        if self.manifest.count == 0:
            raise BraspressValidationError("No volumes added to the quotation.")

        url = get_quotation_url(self.base_url, response_format)
        results: Dict[str, Any] = {}

        for modality in modality_list:
            body = self.build_request_body(shipment_data, modality)
            label = get_modality_label(modality)
            self.logger.info(
                f"Requesting Braspress {label} quotation: {body[VOLUME_COUNT_FIELD]} volume(s), "
                f"{body[WEIGHT_FIELD]} kg"
            )
            payload = encode_request_body(body)
            results[label] = self._post_quotation(url, body, payload, response_format)

        return results

    def _post_quotation(self, url: str, body: Dict[str, Any], payload: bytes, response_format: str) -> Any:
        headers = dict(API_CONFIG["headers"])
        headers["Authorization"] = self.authorization_header

        log_request_details(self.logger, "POST", url, headers, data=body)
        try:
            response = requests.post(url, data=payload, headers=headers, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            self.logger.warning(f"Braspress connection error: {e}")
            raise BraspressConnectionError(f"Error requesting quotation: {e}") from e

        log_response_details(self.logger, response)

        if response.status_code != 200:
            self.logger.warning(f"Braspress quotation failed with HTTP {response.status_code}")
            raise BraspressAPIError(
                f"Error requesting quotation. HTTP Code: {response.status_code}.",
                http_status=response.status_code,
                raw_response=response.text,
            )

        return self._parse_response(response, response_format)

    def _parse_response(self, response: requests.Response, response_format: str) -> Any:
        if response_format == "xml":
            try:
                root = ET.fromstring(response.content)
            except ET.ParseError as e:
                raise BraspressConnectionError("Error requesting quotation: invalid response received.") from e
            return {root.tag: xml_to_dict(root)}

        try:
            data = response.json()
        except ValueError as e:
            raise BraspressConnectionError("Error requesting quotation: invalid response received.") from e

        if not isinstance(data, (dict, list)):
            raise BraspressConnectionError("Error requesting quotation: invalid response received.")
        return data
